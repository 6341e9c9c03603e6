"""入力箇所抽出のテスト。"""

import textwrap

from harness_analyzer.analyzer.pipeline import AnalysisMode, extract_facts

from conftest import line_of

PRELUDE = """
extern "C" int scanf(const char *format, ...);
namespace std {
class istream {
public:
    istream &operator>>(int &value);
    istream &operator>>(double &value);
};
extern istream cin;
}
"""


def _source(snippet):
    return PRELUDE + textwrap.dedent(snippet)


def _variables(parse, snippet):
    tu = parse(_source(snippet))
    return extract_facts(tu, [AnalysisMode.VARIABLES]).variables.variables


class TestFormattedInput:
    """scanf呼び出しの検出テスト。"""

    SOURCE = """
    int main() {
        int x;
        int y;
        scanf("%d %d", &x, &y);
        return 0;
    }
    """

    def test_two_records_share_call_position(self, parse):
        variables = _variables(parse, self.SOURCE)
        line = line_of(_source(self.SOURCE), "scanf(\"%d")
        assert [v.to_dict() for v in variables] == [
            {"name": "x", "type": "int", "pos": [line, 5]},
            {"name": "y", "type": "int", "pos": [line, 5]},
        ]

    def test_parenthesized_target(self, parse):
        variables = _variables(parse, """
        int main() {
            double ratio;
            scanf("%lf", &(ratio));
            return 0;
        }
        """)
        assert [(v.type, v.name) for v in variables] == [("double", "ratio")]

    def test_pointer_parameter(self, parse):
        """アドレス演算子の無い引数でもパラメータを解決する。"""
        variables = _variables(parse, """
        void read(int *out) {
            scanf("%d", out);
        }
        """)
        assert [(v.type, v.name) for v in variables] == [("int *", "out")]

    def test_unresolvable_argument_skipped(self, parse):
        variables = _variables(parse, """
        int main() {
            int values[4];
            scanf("%d", &values[0]);
            return 0;
        }
        """)
        assert variables == []


class TestStreamExtraction:
    """標準入力からのストリーム抽出の検出テスト。"""

    def test_chain(self, parse):
        """連鎖した抽出はすべての右辺を記録する。"""
        snippet = """
        int main() {
            int a;
            double b;
            std::cin >> a >> b;
            return 0;
        }
        """
        variables = _variables(parse, snippet)
        line = line_of(_source(snippet), "std::cin >>")
        assert sorted((v.name, v.type) for v in variables) == [("a", "int"), ("b", "double")]
        assert {tuple(v.pos.to_list()) for v in variables} == {(line, 5)}

    def test_other_stream_ignored(self, parse):
        variables = _variables(parse, """
        void read(std::istream &in) {
            int a;
            in >> a;
        }
        """)
        assert variables == []

    def test_cin_outside_std_ignored(self, parse):
        variables = _variables(parse, """
        namespace io {
        extern std::istream cin;
        }
        int main() {
            int a;
            io::cin >> a;
            return 0;
        }
        """)
        assert variables == []


class TestRecordsPerSite:
    """入力箇所ごとの記録テスト。"""

    def test_same_variable_at_each_site(self, parse):
        """同じ変数でも入力箇所ごとに記録する。"""
        snippet = """
        int main() {
            int n;
            scanf("%d", &n);
            std::cin >> n;
            scanf("%d", &n);
            return 0;
        }
        """
        variables = _variables(parse, snippet)
        assert [v.name for v in variables] == ["n", "n", "n"]
        assert len({v.pos for v in variables}) == 3

    def test_top_level_const_dropped(self, parse):
        variables = _variables(parse, """
        int main() {
            const int limit = 3;
            scanf("%d", &limit);
            return 0;
        }
        """)
        assert [(v.type, v.name) for v in variables] == [("int", "limit")]
