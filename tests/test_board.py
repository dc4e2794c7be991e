import pytest

from uttt.board import (
    DRAW,
    FREE,
    KEY_SPACE,
    O,
    TERNARY_SPAN,
    WIN_LINES,
    X,
    SubBoardState,
    canonical_key,
    decode_key,
    get_winner,
    parse_board,
    serialize_board,
)
from uttt.errors import IllegalMove


def board_of(text: str) -> SubBoardState:
    return SubBoardState.from_cells(parse_board(text))


@pytest.mark.parametrize("line", WIN_LINES)
@pytest.mark.parametrize("mark", [X, O, DRAW])
def test_every_line_wins_for_its_mark(line, mark):
    cells = [FREE] * 9
    for i in line:
        cells[i] = mark
    state = SubBoardState.from_cells(cells)
    assert state.winner == mark
    assert state.is_terminal()
    assert state.legal_moves() == frozenset()
    assert state.legal_cells == ()


def test_full_board_without_line_is_draw():
    state = board_of("XOXXOOOXX")
    assert state.winner == DRAW
    assert state.legal_moves() == frozenset()


def test_ongoing_board_lists_free_cells():
    state = board_of("X-O-X----")
    assert state.winner is None
    assert state.legal_moves() == frozenset({1, 3, 5, 6, 7, 8})
    assert state.legal_cells == (1, 3, 5, 6, 7, 8)


def test_top_row_scenario():
    s = SubBoardState.empty()
    s = s.play(X, 0)
    s = s.play(X, 1)
    assert s.winner is None
    assert s.legal_moves() == frozenset(range(2, 9))
    s = s.play(X, 2)
    assert s.winner == X
    assert s.legal_moves() == frozenset()


def test_diagonal_scenario_is_order_independent():
    orders = [
        [(X, 0), (O, 1), (X, 4), (O, 2), (X, 8)],
        [(X, 8), (O, 2), (X, 4), (O, 1), (X, 0)],
        [(O, 1), (X, 4), (O, 2), (X, 0), (X, 8)],
    ]
    finals = []
    for order in orders:
        s = SubBoardState.empty()
        for mover, cell in order:
            s = s.play(mover, cell)
        assert s.winner == X
        finals.append(s)
    assert len({s.key for s in finals}) == 1
    assert finals[0] == finals[1] == finals[2]


def test_play_on_occupied_cell_returns_none():
    s = SubBoardState.empty().play(X, 4)
    assert s.play(O, 4) is None
    assert s.cells[4] == X


def test_play_on_decided_board_is_illegal():
    s = board_of("XXX-OO---")
    with pytest.raises(IllegalMove, match="already decided"):
        s.play(O, 3)
    with pytest.raises(IllegalMove):
        board_of("XOXXOOOXX").play(X, 0)


def test_full_board_with_a_line_reports_the_line():
    # anti diagonal 2-4-6, no free cell left
    state = board_of("OOXXXOXOO")
    assert state.winner == X


def test_parallel_lines_resolve_in_checking_order():
    # columns before rows, left to right and top to bottom
    assert get_winner(parse_board("XO-XO-XO-")) == X
    assert get_winner(parse_board("OX-OX-OX-")) == O
    assert get_winner(parse_board("-OX-OX-OX")) == O
    assert get_winner(parse_board("XXXOOO---")) == X
    assert get_winner(parse_board("OOOXXX---")) == O
    assert get_winner(parse_board("---XXXOOO")) == X


@pytest.mark.parametrize("mover,cell", [(FREE, 0), (7, 0), (X, -1), (X, 9)])
def test_play_rejects_bad_arguments(mover, cell):
    with pytest.raises(IllegalMove):
        SubBoardState.empty().play(mover, cell)


def test_play_does_not_touch_parent():
    parent = SubBoardState.empty()
    child = parent.play(O, 8)
    assert parent.cells == (FREE,) * 9
    assert child.cells[8] == O


def test_keys_follow_ternary_formula_without_draw_cells():
    assert SubBoardState.empty().key == 0
    assert board_of("X--------").key == 3 ** 8
    assert board_of("--------O").key == 2
    assert board_of("XXX------").key == 3 ** 8 + 3 ** 7 + 3 ** 6
    assert board_of("OOOOOOOOO").key == 3 ** 9 - 1


def test_keys_with_draw_cells_are_shifted_radix4():
    assert board_of("--------D").key == TERNARY_SPAN + 3
    assert board_of("D--------").key == TERNARY_SPAN + 3 * 4 ** 8
    assert board_of("DDDDDDDDD").key == KEY_SPACE - 1
    # X in cell 0 and D in cell 1 would share a plain base-3 key
    assert board_of("X--------").key != board_of("-D-------").key


@pytest.mark.parametrize("text", ["---------", "XO-------", "X-O-D-O-X", "DDDXXXOOO", "OXOXOXOXD"])
def test_decode_inverts_canonical_key(text):
    cells = parse_board(text)
    assert decode_key(canonical_key(cells)) == cells


def test_decode_rejects_out_of_range():
    with pytest.raises(ValueError):
        decode_key(KEY_SPACE)
    with pytest.raises(ValueError):
        decode_key(-1)


def test_child_key_matches_play():
    for text in ["---------", "X---O----", "XD-------", "-O-D-X---"]:
        s = board_of(text)
        for cell in s.legal_cells:
            for mover in (X, O, DRAW):
                assert s.child_key(mover, cell) == s.play(mover, cell).key


def test_parse_and_serialize():
    assert parse_board("xo-d-----") == (X, O, FREE, DRAW, FREE, FREE, FREE, FREE, FREE)
    assert parse_board("120300000") == (X, O, FREE, DRAW, FREE, FREE, FREE, FREE, FREE)
    assert serialize_board(parse_board("XO-D-----")) == "XO-D-----"
    with pytest.raises(ValueError):
        parse_board("XO")
    with pytest.raises(ValueError):
        parse_board("XO-Z-----")


def test_from_cells_validates():
    with pytest.raises(ValueError):
        SubBoardState.from_cells([0] * 8)
    with pytest.raises(ValueError):
        SubBoardState.from_cells([4] + [0] * 8)


def test_render_shows_rows_winner_and_key():
    out = board_of("XXX-OO---").render()
    lines = out.splitlines()
    assert lines[0] == "X X X"
    assert lines[1] == "- O O"
    assert lines[3] == "Winner: X"
    assert lines[4] == f"Key: {3 ** 8 + 3 ** 7 + 3 ** 6 + 2 * 3 ** 4 + 2 * 3 ** 3}"
