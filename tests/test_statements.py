"""
Tests for the statement classifier.

Each supported line form maps to exactly one statement variant; anything
else becomes Unrecognized and is reported once.
"""

from chuk_mcp_sonic_pi.constants import StatementKind
from chuk_mcp_sonic_pi.parser import (
    Conditional,
    CursorAssign,
    DefaultsChange,
    InstrumentSelect,
    Play,
    RandomAssign,
    RepeatBlock,
    SampleHit,
    ScaleAssign,
    SequenceAssign,
    TempoChange,
    TempoScope,
    Unrecognized,
    ValueAssign,
    Wait,
    classify,
    collect_warnings,
    scan,
    split_top_level,
    walk,
)
from chuk_mcp_sonic_pi.parser.statements import list_items, split_arguments, unwrap_call


def classify_text(text: str):
    return classify(scan(text))


def classify_one(text: str):
    statements = classify_text(text)
    assert len(statements) == 1
    return statements[0]


class TestTextHelpers:
    """Tests for argument splitting helpers."""

    def test_split_top_level(self) -> None:
        """Commas inside brackets and quotes do not split."""
        assert split_top_level("chord(:e3, :minor), release: 2") == [
            "chord(:e3, :minor)",
            "release: 2",
        ]
        assert split_top_level("'a,b', [1, 2]") == ["'a,b'", "[1, 2]"]

    def test_split_arguments(self) -> None:
        """Keyword options are separated from positional items."""
        positional, options = split_arguments(":e3, :minor_pentatonic, num_octaves: 2")
        assert positional == [":e3", ":minor_pentatonic"]
        assert options == {"num_octaves": "2"}

    def test_unwrap_call_forms(self) -> None:
        """All Ruby call spellings give the same arguments."""
        for text in ("ring(1, 2)", "(ring 1, 2)", "(ring(1, 2))", "ring 1, 2"):
            assert unwrap_call(text, "ring") == "1, 2"
        assert unwrap_call("ringer 1", "ring") is None

    def test_list_items(self) -> None:
        """Lists and rings are sequence literals."""
        assert list_items("[60, 64, 67]") == ["60", "64", "67"]
        assert list_items("(ring :c4, :e4)") == [":c4", ":e4"]
        assert list_items("60") is None


class TestSimpleStatements:
    """Tests for single-line statement forms."""

    def test_tempo(self) -> None:
        """use_bpm is a tempo change."""
        stmt = classify_one("use_bpm 120")
        assert isinstance(stmt, TempoChange)
        assert stmt.bpm == "120"

    def test_instrument(self) -> None:
        """use_synth selects an instrument."""
        stmt = classify_one("use_synth :tb303")
        assert isinstance(stmt, InstrumentSelect)
        assert stmt.name == "tb303"

    def test_defaults(self) -> None:
        """use_synth_defaults collects options."""
        stmt = classify_one("use_synth_defaults amp: 0.5, release: 2")
        assert isinstance(stmt, DefaultsChange)
        assert stmt.options == {"amp": "0.5", "release": "2"}

    def test_wait(self) -> None:
        """sleep keeps its expression text."""
        stmt = classify_one("sleep 0.5+swing")
        assert isinstance(stmt, Wait)
        assert stmt.beats == "0.5+swing"

    def test_play(self) -> None:
        """play takes a source and options."""
        stmt = classify_one("play chord(:e3, :minor), release: 0.3, amp: 0.5")
        assert isinstance(stmt, Play)
        assert stmt.source == "chord(:e3, :minor)"
        assert stmt.options == {"release": "0.3", "amp": "0.5"}

    def test_play_chord_wraps_source(self) -> None:
        """play_chord with a bare source becomes a list."""
        stmt = classify_one("play_chord chords.tick")
        assert isinstance(stmt, Play)
        assert stmt.source == "[chords.tick]"
        stmt = classify_one("play_chord [:c4, :e4]")
        assert stmt.source == "[:c4, :e4]"

    def test_sample(self) -> None:
        """sample takes a name and options."""
        stmt = classify_one("sample :drum_bass_hard, amp: 0.9")
        assert isinstance(stmt, SampleHit)
        assert stmt.name == ":drum_bass_hard"
        assert stmt.options == {"amp": "0.9"}

    def test_unrecognized(self) -> None:
        """Unsupported lines are kept as Unrecognized."""
        stmt = classify_one('puts "hello"')
        assert isinstance(stmt, Unrecognized)
        assert stmt.text == 'puts "hello"'

    def test_play_without_source(self) -> None:
        """A play with only options is not a play."""
        assert isinstance(classify_one("play amp: 1"), Unrecognized)


class TestAssignments:
    """Tests for the assignment forms."""

    def test_sequence(self) -> None:
        """Rings, lists and chords bind sequences."""
        stmt = classify_one("bass = (ring :e1, :e1, :g1, :a1)")
        assert isinstance(stmt, SequenceAssign)
        assert stmt.items == (":e1", ":e1", ":g1", ":a1")
        chord = classify_one("c = chord(:e3, :minor)")
        assert isinstance(chord, SequenceAssign)
        assert chord.items == ("chord(:e3, :minor)",)

    def test_multiline_sequence(self) -> None:
        """A literal split over lines is one statement."""
        stmt = classify_one("chords = [\n  chord(:e3, :minor),\n  chord(:c3, :major)\n]")
        assert isinstance(stmt, SequenceAssign)
        assert stmt.items == ("chord(:e3, :minor)", "chord(:c3, :major)")

    def test_scale(self) -> None:
        """scale assignments capture root, mode and octaves."""
        stmt = classify_one("notes = (scale :e3, :minor_pentatonic, num_octaves: 2)")
        assert isinstance(stmt, ScaleAssign)
        assert (stmt.root, stmt.mode, stmt.num_octaves) == (":e3", ":minor_pentatonic", "2")

    def test_random(self) -> None:
        """rrand and rrand_i assignments."""
        stmt = classify_one("cutoff = rrand(70, 120)")
        assert isinstance(stmt, RandomAssign)
        assert (stmt.low, stmt.high, stmt.integer) == ("70", "120", False)
        assert classify_one("n = rrand_i(1, 4)").integer

    def test_cursor(self) -> None:
        """x = y.tick is a cursor read."""
        stmt = classify_one("n = bass.tick")
        assert isinstance(stmt, CursorAssign)
        assert stmt.source == "bass"

    def test_value(self) -> None:
        """Numbers, notes and choose are value assignments."""
        for text, expr in (
            ("swing = 0.15", "0.15"),
            ("root = :e2", ":e2"),
            ("n = notes.choose", "notes.choose"),
        ):
            stmt = classify_one(text)
            assert isinstance(stmt, ValueAssign)
            assert stmt.expr == expr

    def test_unsupported_value(self) -> None:
        """Assignments of unsupported values are unrecognized."""
        assert isinstance(classify_one('name = "text"'), Unrecognized)


class TestBlocks:
    """Tests for nested block statements."""

    def test_repeat(self) -> None:
        """N.times do ... end carries its body."""
        stmt = classify_one("4.times do\n  play 60\n  sleep 0.25\nend")
        assert isinstance(stmt, RepeatBlock)
        assert stmt.count == "4"
        assert [s.kind for s in stmt.body] == [StatementKind.PLAY, StatementKind.WAIT]

    def test_tempo_scope(self) -> None:
        """with_bpm N do ... end carries its body."""
        stmt = classify_one("with_bpm 120 do\n  sleep 1\nend")
        assert isinstance(stmt, TempoScope)
        assert stmt.bpm == "120"
        assert len(stmt.body) == 1

    def test_conditional_with_else(self) -> None:
        """if one_in(N) splits at its else."""
        stmt = classify_one("if one_in(3)\n  play 60\nelse\n  play 72\n  sleep 1\nend")
        assert isinstance(stmt, Conditional)
        assert stmt.one_in == "3"
        assert len(stmt.body) == 1
        assert len(stmt.else_body) == 2

    def test_conditional_bare_argument(self) -> None:
        """if one_in 4 without parentheses."""
        stmt = classify_one("if one_in 4\n  play 60\nend")
        assert isinstance(stmt, Conditional)
        assert stmt.one_in == "4"

    def test_suffix_conditional(self) -> None:
        """`stmt if one_in(N)` wraps the statement."""
        stmt = classify_one("sample :drum_cymbal_open if one_in(4)")
        assert isinstance(stmt, Conditional)
        assert stmt.one_in == "4"
        assert isinstance(stmt.body[0], SampleHit)

    def test_nested_blocks(self) -> None:
        """Blocks nest to any depth."""
        stmt = classify_one("2.times do\n  with_bpm 60 do\n    play 60\n  end\nend")
        assert isinstance(stmt, RepeatBlock)
        inner = stmt.body[0]
        assert isinstance(inner, TempoScope)
        assert isinstance(inner.body[0], Play)

    def test_unknown_do_block_is_inlined(self) -> None:
        """Unknown do-blocks warn once and keep their body."""
        statements = classify_text("with_fx :reverb do\n  play 60\n  sleep 1\nend")
        assert [s.kind for s in statements] == [
            StatementKind.UNRECOGNIZED,
            StatementKind.PLAY,
            StatementKind.WAIT,
        ]

    def test_other_blocks_are_skipped(self) -> None:
        """Other keyword blocks are skipped whole."""
        statements = classify_text("while x > 1\n  play 60\nend\nif x > 1\n  play 60\nend\nplay 72")
        kinds = [s.kind for s in statements]
        assert kinds == [StatementKind.UNRECOGNIZED, StatementKind.UNRECOGNIZED, StatementKind.PLAY]


class TestWarnings:
    """Tests for warning collection."""

    def test_warning_names_loop_and_line(self) -> None:
        """Warnings name the block and quote the trimmed line."""
        statements = classify_text('  puts "hi"\nplay 60')
        assert collect_warnings(statements, "drums") == ['Skipped line in drums: "puts "hi""']

    def test_nested_warnings(self) -> None:
        """Warnings come from nested bodies too, in source order."""
        statements = classify_text("4.times do\n  foo\n  play 60\nend\nbar")
        warnings = collect_warnings(statements, "a")
        assert warnings == ['Skipped line in a: "foo"', 'Skipped line in a: "bar"']

    def test_walk_visits_else(self) -> None:
        """walk includes both conditional branches."""
        statements = classify_text("if one_in(2)\n  play 1\nelse\n  play 2\nend")
        assert len(list(walk(statements))) == 3

    def test_blank_and_comment_lines(self) -> None:
        """Blank and comment-only lines produce nothing."""
        assert classify_text("\n   \n# comment\n") == []

    def test_definitions_are_not_run(self) -> None:
        """define and def bodies are skipped, not inlined."""
        statements = classify_text(
            "define :bass do\n  play 40\n  sleep 1\nend\n"
            "def hit\n  sample :bd_haus\nend\n"
            "play 72"
        )
        assert [s.kind for s in statements] == [
            StatementKind.UNRECOGNIZED,
            StatementKind.UNRECOGNIZED,
            StatementKind.PLAY,
        ]
        assert collect_warnings(statements, "main") == [
            'Skipped line in main: "define :bass do"',
            'Skipped line in main: "def hit"',
        ]
