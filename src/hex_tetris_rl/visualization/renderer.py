from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple

import pygame

from hex_tetris_rl.game import CellState, Field, GameGrid, Piece, SpecialCellType
from hex_tetris_rl.game.hexmath import AxialCoord, axial_to_pixel


Color = Tuple[int, int, int]

BACKGROUND: Color = (10, 10, 14)
EMPTY: Color = (30, 30, 36)
FLASH: Color = (255, 255, 255)

SPECIAL_MARKERS = {
    SpecialCellType.BOMB: (20, 20, 20),
    SpecialCellType.MULTIPLIER: (255, 215, 0),
    SpecialCellType.FROZEN: (180, 220, 255),
}


def _color(value: Optional[str]) -> Color:
    if not value:
        return (200, 200, 200)
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _dim(color: Color, factor: float) -> Color:
    r, g, b = color
    return int(r * factor), int(g * factor), int(b * factor)


class HexRenderer:
    """Draws a hex field of flat-top hexagons onto a pygame surface."""

    def __init__(self, field: Field, cell_size: int = 16, margin: int = 20, panel_width: int = 200) -> None:
        self.field = field
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width

    def board_size(self) -> Tuple[int, int]:
        width = int(self.cell_size * (1.5 * (self.field.columns - 1) + 2))
        height = int(self.cell_size * math.sqrt(3) * (self.field.rows + 0.5))
        return width, height

    def window_size(self) -> Tuple[int, int]:
        w, h = self.board_size()
        return w + self.margin * 3 + self.panel_width, h + self.margin * 2

    def _center(self, coord: AxialCoord, size: float, origin: Tuple[float, float]) -> Tuple[float, float]:
        x, y = axial_to_pixel(coord, size)
        return origin[0] + x + size, origin[1] + y + size * math.sqrt(3) / 2

    def _corners(self, cx: float, cy: float, size: float) -> List[Tuple[float, float]]:
        return [
            (cx + size * math.cos(math.radians(60 * i)), cy + size * math.sin(math.radians(60 * i)))
            for i in range(6)
        ]

    def _draw_hex(self, surf: pygame.Surface, coord: AxialCoord, color: Color, size: float,
                  origin: Tuple[float, float], width: int = 0) -> Tuple[float, float]:
        cx, cy = self._center(coord, size, origin)
        pygame.draw.polygon(surf, color, self._corners(cx, cy, size - 1), width)
        return cx, cy

    def _cell_color(self, state: CellState) -> Color:
        if not state.filled:
            return EMPTY
        if state.clearing is not None:
            return FLASH
        color = _color(state.color)
        # Thawed frozen cells are drawn slightly faded until their second clear
        return _dim(color, 0.75) if state.frozen_cleared else color

    def draw_grid(self, surf: pygame.Surface, grid: GameGrid) -> None:
        origin = (self.margin, self.margin)
        for coord in self.field.coords():
            state = grid.cell(coord)
            cx, cy = self._draw_hex(surf, coord, self._cell_color(state), self.cell_size, origin)
            if state.filled and state.special is not None and state.clearing is None:
                pygame.draw.circle(surf, SPECIAL_MARKERS[state.special], (int(cx), int(cy)), self.cell_size // 3)

    def draw_piece(self, surf: pygame.Surface, cells: Iterable[AxialCoord], color: Color,
                   outline: bool = False, special: Optional[SpecialCellType] = None) -> None:
        origin = (self.margin, self.margin)
        for coord in cells:
            if coord not in self.field:
                continue
            cx, cy = self._draw_hex(surf, coord, color, self.cell_size, origin, width=2 if outline else 0)
            if special is not None and not outline:
                pygame.draw.circle(surf, SPECIAL_MARKERS[special], (int(cx), int(cy)), self.cell_size // 3)

    def draw_preview(self, surf: pygame.Surface, piece: Optional[Piece], top_left: Tuple[int, int]) -> None:
        if piece is None:
            return
        size = self.cell_size * 0.75
        cells = piece.cells()
        min_q = min(c.q for c in cells)
        min_y = min(axial_to_pixel(c, size)[1] for c in cells)
        origin = (top_left[0] - min_q * 1.5 * size, top_left[1] - min_y)
        for coord in cells:
            self._draw_hex(surf, coord, _color(piece.color), size, origin)

    def draw(
        self,
        screen: pygame.Surface,
        grid: GameGrid,
        piece: Optional[Piece] = None,
        ghost: Optional[Piece] = None,
        next_piece: Optional[Piece] = None,
        lines: Optional[List[str]] = None,
        font: Optional[pygame.font.Font] = None,
    ) -> None:
        screen.fill(BACKGROUND)
        self.draw_grid(screen, grid)
        if ghost is not None:
            self.draw_piece(screen, ghost.cells(), _dim(_color(ghost.color), 0.5), outline=True)
        if piece is not None:
            self.draw_piece(screen, piece.cells(), _color(piece.color), special=piece.special)

        panel_x = self.margin * 2 + self.board_size()[0]
        if font is not None:
            y = self.margin
            for text in lines or []:
                screen.blit(font.render(text, True, (230, 230, 230)), (panel_x, y))
                y += font.get_linesize() + 4
            screen.blit(font.render("Next", True, (230, 230, 230)), (panel_x, y + 8))
            self.draw_preview(screen, next_piece, (panel_x, y + 16 + font.get_linesize()))
        pygame.display.flip()
