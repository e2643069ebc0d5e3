"""
Parser - from script text to classified statements.

The parser is the first of the two compilation phases:
- scanner: comment and string aware lines
- blocks: depth-balanced loop and nested-body extraction
- expressions: safe numeric expression evaluation
- statements: the closed set of statement variants
"""

from chuk_mcp_sonic_pi.parser.blocks import (
    Block,
    Script,
    collect_block,
    loop_name,
    split_lines,
    split_script,
)
from chuk_mcp_sonic_pi.parser.expressions import evaluate_number, is_numeric_expression
from chuk_mcp_sonic_pi.parser.scanner import ScannedLine, scan, scan_line, strip_comment
from chuk_mcp_sonic_pi.parser.statements import (
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
    Statement,
    TempoChange,
    TempoScope,
    Unrecognized,
    ValueAssign,
    Wait,
    classify,
    collect_warnings,
    split_top_level,
    walk,
)

__all__ = [
    # Scanner
    "ScannedLine",
    "scan",
    "scan_line",
    "strip_comment",
    # Blocks
    "Block",
    "Script",
    "collect_block",
    "loop_name",
    "split_lines",
    "split_script",
    # Expressions
    "evaluate_number",
    "is_numeric_expression",
    # Statements
    "Statement",
    "TempoChange",
    "InstrumentSelect",
    "DefaultsChange",
    "SequenceAssign",
    "ScaleAssign",
    "RandomAssign",
    "ValueAssign",
    "CursorAssign",
    "RepeatBlock",
    "TempoScope",
    "Conditional",
    "Wait",
    "Play",
    "SampleHit",
    "Unrecognized",
    "classify",
    "collect_warnings",
    "split_top_level",
    "walk",
]
