"""Bibliography layout policies.

The engine flags one of two layouts alongside the bibliography entries:

- hanging indent: first line flush, following lines indented
- second-field alignment: entry numbers floated in a left column, bodies
  aligned to the right of it

Hanging indent wins if both flags are set. Without either flag the
entries keep the default flow layout.
"""

from dataclasses import dataclass
from enum import Enum

from citesync.schemas.protocol import BibliographyFormat


HANGING_INDENT_STYLE = "padding-left: 1.3em;text-indent: -1.3em;"
NOWRAP_STYLE = "white-space: nowrap;"
LEFT_MARGIN_BASE_STYLE = "float: left;"
LEFT_MARGIN_DEFAULT_OFFSET = "padding-right:0.3em;"
RIGHT_INLINE_BASE_STYLE = "display: inline-block;white-space: normal;"
RIGHT_INLINE_WIDTH = "width:90%;"


class BibliographyLayout(str, Enum):
    """Layout policy selected from BibliographyFormat flags."""

    FLOW = "flow"
    HANGING_INDENT = "hanging-indent"
    SECOND_FIELD_ALIGN = "second-field-align"


@dataclass(frozen=True)
class BibliographyStyles:
    """Styles to set on each bibliography part; None leaves a part unstyled."""

    layout: BibliographyLayout
    entry: str | None = None
    left_margin: str | None = None
    right_inline: str | None = None


def select_layout(flags: BibliographyFormat) -> BibliographyLayout:
    if flags.hangingindent:
        return BibliographyLayout.HANGING_INDENT
    if flags.second_field_align:
        return BibliographyLayout.SECOND_FIELD_ALIGN
    return BibliographyLayout.FLOW


def resolve_styles(flags: BibliographyFormat) -> BibliographyStyles:
    """Compute the styles for the layout the flags select.

    Args:
        flags: Bibliography format flags from the engine

    Returns:
        BibliographyStyles for entries, left-margin numbers and right-inline bodies

    Example:
        >>> resolve_styles(BibliographyFormat(second_field_align=True, maxoffset=3))
        BibliographyStyles(layout=..., entry='white-space: nowrap;',
                           left_margin='float: left;width: 2em;',
                           right_inline='display: inline-block;white-space: normal;width:90%;')
    """
    layout = select_layout(flags)
    if layout == BibliographyLayout.HANGING_INDENT:
        return BibliographyStyles(layout=layout, entry=HANGING_INDENT_STYLE)

    if layout == BibliographyLayout.SECOND_FIELD_ALIGN:
        offset = LEFT_MARGIN_DEFAULT_OFFSET
        width = ""
        if flags.maxoffset:
            offset = f"width: {flags.maxoffset / 2 + 0.5:g}em;"
            width = RIGHT_INLINE_WIDTH
        return BibliographyStyles(
            layout=layout,
            entry=NOWRAP_STYLE,
            left_margin=LEFT_MARGIN_BASE_STYLE + offset,
            right_inline=RIGHT_INLINE_BASE_STYLE + width,
        )

    return BibliographyStyles(layout=layout)


__all__ = [
    "BibliographyLayout",
    "BibliographyStyles",
    "resolve_styles",
    "select_layout",
]
