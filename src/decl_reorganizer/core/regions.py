"""
Region markers: retrieval as declaration items and removal
"""

import logging

from decl_reorganizer.core.code_items import DeclarationItem, KindCodeItem
from decl_reorganizer.core.comment_helper import (
    REGION_END_PATTERN,
    REGION_START_PATTERN,
    CodeLanguage,
    get_comment_prefix_for_language,
)
from decl_reorganizer.core.text_buffer import TextSurface

logger = logging.getLogger(__name__)


class CodeRegionService:
    """Finds and removes #region / #endregion blocks"""

    def __init__(self, language: CodeLanguage = CodeLanguage.UNKNOWN):
        self.language = language

    def retrieve_regions(self, surface: TextSurface) -> list[DeclarationItem]:
        """Pair region markers into REGION items spanning both marker lines"""
        if get_comment_prefix_for_language(self.language) is None:
            return []

        regions = []
        open_regions: list[tuple[int, str]] = []
        position = 0
        length = len(surface)
        while position < length:
            line_end = surface.line_end(position)
            line = surface.get_text(position, line_end)

            if start_match := REGION_START_PATTERN.match(line):
                open_regions.append((position, start_match.group("name").strip()))
            elif REGION_END_PATTERN.match(line):
                if open_regions:
                    start, name = open_regions.pop()
                    regions.append(
                        DeclarationItem(
                            kind=KindCodeItem.REGION,
                            span=surface.create_span(start, line_end),
                            name=name,
                        )
                    )
                else:
                    logger.warning(f"Ignoring unmatched region end at offset {position}")

            position = line_end + 1

        for start, name in open_regions:
            logger.warning(f"Ignoring unterminated region '{name}' at offset {start}")

        regions.sort(key=lambda region: region.start_offset)
        return regions

    def cleanup_existing_regions(
        self,
        surface: TextSurface,
        code_items: list[DeclarationItem],
    ) -> list[DeclarationItem]:
        """Delete region marker lines and drop region items.

        Returns:
            The remaining items
        """
        regions = [item for item in code_items if item.kind == KindCodeItem.REGION]
        for region in sorted(regions, key=lambda r: r.start_offset, reverse=True):
            self._delete_line(surface, surface.line_start(region.end_offset))
            self._delete_line(surface, region.start_offset)
            logger.debug(f"Removed region '{region.name}'")

        return [item for item in code_items if item.kind != KindCodeItem.REGION]

    @staticmethod
    def _delete_line(surface: TextSurface, line_start: int) -> None:
        line_end = surface.line_end(line_start)
        surface.delete_text(line_start, min(line_end + 1, len(surface)))
