"""データ形状分類のテスト。"""

from harness_analyzer.analyzer.classification import classify_parameters
from harness_analyzer.models.records import DataShape


class TestMatrixClassification:
    """ポインタのポインタ + サイズ2個の判定テスト。"""

    def test_matrix(self):
        """T** と size_t 2個は matrix で3個消費する。"""
        result = classify_parameters(["int **", "size_t", "size_t", "int"])
        assert result.shapes == (DataShape.MATRIX,)
        assert result.category == "matrix"
        assert result.consumed == 3

    def test_matrix_image(self):
        """指す先が画像型なら image を追加する。"""
        result = classify_parameters(["RGBImage **", "size_t", "size_t"])
        assert result.category == "matrix image"
        assert result.consumed == 3

    def test_matrix_with_std_size_t(self):
        """std::size_t と unsigned long もサイズ型として扱う。"""
        result = classify_parameters(["double **", "std::size_t", "unsigned long"])
        assert result.category == "matrix"

    def test_matrix_takes_priority_over_array(self):
        """3個の並びが成立すれば array より先に matrix と判定する。"""
        result = classify_parameters(["char **", "size_t", "size_t"])
        assert result.category == "matrix"
        assert result.consumed == 3


class TestArrayClassification:
    """ポインタ + サイズ1個の判定テスト。"""

    def test_array(self):
        """T* と size_t は array で2個消費する。"""
        result = classify_parameters(["int *", "size_t", "SortOrder"])
        assert result.category == "array"
        assert result.consumed == 2

    def test_text(self):
        """指す先が文字型なら text を追加する。"""
        result = classify_parameters(["const char *", "size_t"])
        assert result.category == "array text"

    def test_double_pointer_with_single_size_is_array(self):
        """サイズが1個だけのポインタのポインタは array になる。"""
        result = classify_parameters(["int **", "size_t", "int"])
        assert result.category == "array"
        assert result.consumed == 2


class TestUnknownClassification:
    """どの規則にも一致しない場合のテスト。"""

    def test_no_parameters(self):
        result = classify_parameters([])
        assert result.category == "unknown"
        assert result.consumed == 0
        assert not result.is_known

    def test_size_not_matching(self):
        """サイズ型の綴りが一致しなければ unknown。"""
        result = classify_parameters(["int *", "int"])
        assert result.category == "unknown"

    def test_first_not_pointer(self):
        result = classify_parameters(["int", "size_t", "size_t"])
        assert result.category == "unknown"

    def test_input_list_is_not_modified(self):
        """呼び出し側の型名リストは変更しない。"""
        types = ["int *", "size_t", "int"]
        classify_parameters(types)
        assert types == ["int *", "size_t", "int"]
