"""関数定義抽出のテスト。"""

import textwrap

from harness_analyzer.analyzer.pipeline import AnalysisMode, extract_facts

from conftest import line_of

PRELUDE = """
typedef decltype(sizeof(0)) size_t;
struct RGBImage { unsigned char r, g, b; };
"""


def _source(snippet):
    return PRELUDE + textwrap.dedent(snippet)


def _functions(parse, snippet):
    tu = parse(_source(snippet))
    facts = extract_facts(tu, [AnalysisMode.FUNCTIONS])
    return {record.name: record for record in facts.functions.functions}


class TestSortScenario:
    """列挙型の末尾パラメータを持つ配列関数のテスト。"""

    SOURCE = """
    enum SortOrder { ASC, DESC };
    SortOrder DEFAULT_ORDER;
    int unrelated;

    void sort(int* arr, size_t n, SortOrder order) {
        (void)arr;
        (void)n;
        (void)order;
    }
    """

    def test_single_record(self, parse):
        functions = _functions(parse, self.SOURCE)
        assert list(functions) == ["sort"]

    def test_category_and_parameters(self, parse):
        record = _functions(parse, self.SOURCE)["sort"]
        assert record.category == "array"
        assert record.return_type == "void"
        assert [(p.type_spelling, p.name) for p in record.parameters] == [
            ("int *", "arr"),
            ("size_t", "n"),
            ("enumeration SortOrder", "order"),
        ]

    def test_enum_selectors(self, parse):
        record = _functions(parse, self.SOURCE)["sort"]
        assert [s.to_dict() for s in record.enum_selectors] == [
            {"var": "order", "enum": ["SortOrder::ASC", "SortOrder::DESC"]}
        ]

    def test_candidate_arguments(self, parse):
        record = _functions(parse, self.SOURCE)["sort"]
        assert [c.to_dict() for c in record.candidate_arguments] == [
            {"var": "order", "names": ["DEFAULT_ORDER"]}
        ]

    def test_positions(self, parse):
        """開始位置は定義の先頭、終了位置は閉じ括弧。"""
        source = _source(self.SOURCE)
        record = _functions(parse, self.SOURCE)["sort"]
        assert record.start_pos.to_list() == [line_of(source, "void sort("), 1]
        end_line = line_of(source, "(void)order;") + 1
        assert record.end_pos.to_list() == [end_line, 1]

    def test_serialized_keys(self, parse):
        data = _functions(parse, self.SOURCE)["sort"].to_dict()
        assert list(data) == [
            "name",
            "returnType",
            "parameters",
            "startPos",
            "endPos",
            "type",
            "enumValues",
            "argumentVariables",
        ]
        assert data["parameters"][0] == {"type": "int *", "title": "arr"}


class TestCategories:
    """データ形状ごとの抽出テスト。"""

    def test_matrix_image(self, parse):
        functions = _functions(parse, """
        int brightness;
        void blur(RGBImage** pixels, size_t rows, size_t cols, int radius) {}
        """)
        record = functions["blur"]
        assert record.category == "matrix image"
        assert len(record.parameters) == 4
        assert [c.to_dict() for c in record.candidate_arguments] == [
            {"var": "radius", "names": ["brightness"]}
        ]
        assert record.enum_selectors == []

    def test_text(self, parse):
        functions = _functions(parse, """
        int count_words(const char* text, size_t length) { return 0; }
        """)
        record = functions["count_words"]
        assert record.category == "array text"
        assert record.return_type == "int"
        assert record.candidate_arguments == []

    def test_unknown_has_no_derived_fields(self, parse):
        functions = _functions(parse, """
        enum Mode { FAST, SLOW };
        Mode PRESET;
        int add(int a, Mode mode) { return a; }
        """)
        record = functions["add"]
        assert record.category == "unknown"
        assert record.enum_selectors == []
        assert record.candidate_arguments == []
        assert len(record.parameters) == 2

    def test_scoped_enum(self, parse):
        functions = _functions(parse, """
        enum class Channel { Red, Green, Blue };
        void pick(double* values, size_t n, Channel channel) {}
        """)
        record = functions["pick"]
        assert record.parameters[2].type_spelling == "enumeration Channel"
        assert record.enum_selectors[0].enumerators == [
            "Channel::Red",
            "Channel::Green",
            "Channel::Blue",
        ]


class TestDefinitionsOnly:
    """抽出対象の関数の範囲のテスト。"""

    def test_prototype_skipped(self, parse):
        functions = _functions(parse, """
        void declared_only(int* a, size_t n);
        void defined(int* a, size_t n) {}
        """)
        assert list(functions) == ["defined"]

    def test_methods_included(self, parse):
        functions = _functions(parse, """
        class Filter {
        public:
            void apply(float* data, size_t n) {}
            void later(float* data, size_t n);
        };
        void Filter::later(float* data, size_t n) {}
        """)
        assert sorted(functions) == ["apply", "later"]

    def test_templates_excluded(self, parse):
        functions = _functions(parse, """
        template <typename T>
        void generic(T* a, size_t n) {}
        void concrete(int* a, size_t n) { generic(a, n); }
        """)
        assert list(functions) == ["concrete"]

    def test_out_of_line_template_members_excluded(self, parse):
        """クラステンプレートのクラス外メンバー定義も対象外。"""
        functions = _functions(parse, """
        template <typename T>
        class Box {
        public:
            void fill(T* a, size_t n, int k);
            void inline_fill(T* a, size_t n) {}
            Box();
        };
        template <typename T>
        void Box<T>::fill(T* a, size_t n, int k) {}
        template <typename T>
        Box<T>::Box() {}
        void concrete(int* a, size_t n) {}
        """)
        assert list(functions) == ["concrete"]

    def test_out_of_line_members_of_plain_class_kept(self, parse):
        functions = _functions(parse, """
        namespace images {
        struct Scaler {
            void scale(float* data, size_t n);
        };
        }
        void images::Scaler::scale(float* data, size_t n) {}
        """)
        assert list(functions) == ["scale"]

    def test_walk_is_repeatable(self, parse):
        """同じ構文木を2回走査しても結果は同一。"""
        tu = parse(_source(TestSortScenario.SOURCE))
        first = extract_facts(tu, [AnalysisMode.FUNCTIONS]).functions.to_dict()
        second = extract_facts(tu, [AnalysisMode.FUNCTIONS]).functions.to_dict()
        assert first == second
