"""Tests for the structural parser (block scoping rules)."""

from __future__ import annotations

from decomposer.core.mapping import SPMapping
from decomposer.core.parsing import UNBOUNDED, iter_blocks, parse_blocks

H3_DOC = "\n".join(
    [
        "Intro line",
        "h3. M [xhh] Sidebar",
        "Body 1",
        "h4. Details",
        "Body 2",
        "h3. Next section",
        "Tail",
    ]
)

NESTED_DOC = "\n".join(
    [
        "h2. Area",
        "h3. M [a] One",
        "b1",
        "h4. d4",
        "h5. d5",
        "h6. d6",
        "b2",
        "h2. Next",
        "h3. S [b] Two",
        "x",
        "h1. Top",
    ]
)


def test_heading_task_folds_deeper_headings_into_content() -> None:
    blocks = parse_blocks(H3_DOC)

    assert [b.type for b in blocks] == ["text", "task", "text"]
    intro, task, tail = blocks
    assert intro.content == "Intro line"
    assert task.content == "Body 1\nh4. Details\nBody 2"
    assert task.task_info is not None
    assert task.task_info.title == "Sidebar"
    assert task.task_info.repository == "xhh"
    assert task.task_info.estimation == "M"
    assert task.task_info.estimation_sp == 2
    assert tail.content == "h3. Next section\nTail"


def test_heading_task_is_closed_by_outranking_headings_only() -> None:
    blocks = parse_blocks(NESTED_DOC)

    assert [b.type for b in blocks] == ["text", "task", "text", "task", "text"]
    area, one, next_section, two, top = blocks
    assert area.content == "h2. Area"
    assert one.content == "b1\nh4. d4\nh5. d5\nh6. d6\nb2"
    assert next_section.content == "h2. Next"
    assert two.content == "x"
    assert top.content == "h1. Top"


def test_emphasis_task_is_closed_by_any_heading_but_not_by_prose() -> None:
    text = "\n".join(
        [
            "*S+ [backend] Endpoint*",
            "Some prose",
            "more prose",
            "h6. Notes",
            "after",
        ]
    )
    blocks = parse_blocks(text)

    assert [b.type for b in blocks] == ["task", "text"]
    assert blocks[0].content == "Some prose\nmore prose"
    assert blocks[0].task_info is not None
    assert blocks[0].task_info.risk == "XS"
    assert blocks[1].content == "h6. Notes\nafter"
    assert UNBOUNDED > 6


def test_next_task_line_closes_the_open_task() -> None:
    blocks = parse_blocks("h3. M [a] One\nh4. S [b] Two\nbody of two")
    assert [b.task_info.title for b in blocks if b.task_info] == ["One", "Two"]
    assert blocks[0].content == ""
    assert blocks[1].content == "body of two"


def test_text_without_tasks_is_returned_verbatim() -> None:
    text = "Just prose\n\n  indented *bold*\n"
    blocks = parse_blocks(text)
    assert len(blocks) == 1
    assert blocks[0].type == "text"
    assert blocks[0].content == text


def test_blank_input_yields_no_blocks() -> None:
    assert parse_blocks("") == ()
    assert parse_blocks("  \n\n ") == ()


def test_whitespace_between_tasks_is_dropped() -> None:
    blocks = parse_blocks("S [a] One\n\n\nh2. Section\n\nM [b] Two")
    assert [b.type for b in blocks] == ["task", "text", "task"]
    assert blocks[1].content == "h2. Section"


def test_text_before_a_task_drops_trailing_blank_lines() -> None:
    blocks = parse_blocks("Intro\n\n  \nM [a] x\nh1. Outro\n\n")
    assert blocks[0].content == "Intro"
    assert blocks[2].content == "h1. Outro\n\n"


def test_task_body_trims_leading_blank_lines_and_trailing_space() -> None:
    blocks = parse_blocks("h3. L [db] Migrate\n\n\n  step one\nstep two   \n\nh3. Done")
    assert blocks[0].content == "  step one\nstep two"


def test_unreadable_token_becomes_question_mark_without_points() -> None:
    (block,) = parse_blocks("M+XXL [x] Weird size")
    assert block.task_info is not None
    assert block.task_info.estimation == "?"
    assert block.task_info.estimation_sp is None


def test_mapping_is_injected() -> None:
    (block,) = parse_blocks("S+ [x] Thing", SPMapping({"S": 10, "XS": 4}))
    assert block.task_info is not None
    assert (block.task_info.estimation_sp, block.task_info.risk_sp) == (10, 4)


def test_iter_blocks_matches_parse_blocks() -> None:
    assert tuple(iter_blocks(H3_DOC)) == parse_blocks(H3_DOC)
