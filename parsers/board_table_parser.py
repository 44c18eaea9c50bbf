from core import constants
from parsers.base_parser import TabularBoardParser


class BoardTableParser(TabularBoardParser):
    """
    Parser for department boards without a feed (table.board-table).
    Every data row has a numeric id; rows without one are skipped.
    """

    row_selector = constants.BOARD_TABLE_ROW_SELECTOR
    min_cells = constants.BOARD_TABLE_MIN_CELLS
