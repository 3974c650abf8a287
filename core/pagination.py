"""
Printable page split for invoice line items.

Heuristic, single pass: each item's rendered height is estimated from its
image count and items are packed into pages in order. No feedback from the
real rendered size is used.
"""

import math
from typing import Sequence

from core.config import PaginationConfig
from core.models import LineItem

Page = list[LineItem]


def estimate_item_height(item: LineItem, config: PaginationConfig) -> int:
    """Base row plus one thumbnail grid row per `images_per_row` images."""
    image_rows = math.ceil(len(item.images) / config.images_per_row)
    return config.item_base_height + image_rows * config.image_row_height


def paginate(items: Sequence[LineItem], config: PaginationConfig | None = None) -> list[Page]:
    """
    Split items into pages without reordering them.

    The first page starts below the header, later pages below a small top
    margin. An item that does not fit closes the current page (the first page
    can close empty when its first item is taller than the space under the
    header) and opens the next one; an item taller than a whole page still
    gets its own page. If the footer does not fit under the last item, a
    trailing empty page carries it.

    Always returns at least one page; an invoice without items is a single
    empty page (header and footer only).
    """
    config = config or PaginationConfig()

    pages: list[Page] = []
    current: Page = []
    height = config.header_height

    for item in items:
        item_height = estimate_item_height(item, config)

        if height + item_height > config.page_height and (current or not pages):
            pages.append(current)
            current = []
            height = config.continuation_top_margin

        current.append(item)
        height += item_height

    if current:
        pages.append(current)

    if height + config.footer_height > config.page_height:
        pages.append([])

    if not pages:
        pages.append([])

    return pages


def page_item_ids(pages: list[Page]) -> list[list[str]]:
    """Item ids per page, for transport."""
    return [[item.id for item in page] for page in pages]
