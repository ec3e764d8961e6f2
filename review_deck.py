import pygame

from gesture_state import Direction

BG = (15, 15, 20)
TEXT = (220, 220, 220)
CURSOR = (80, 140, 255)
MARKED = (220, 60, 60)
KEPT = (60, 200, 120)
# Classifier directions are in image terms; the user sees them mirrored.
USER_TILT = {Direction.NEUTRAL: "neutral", Direction.LEFT: "right", Direction.RIGHT: "left"}

CARD_COLORS = [
    (70, 90, 120), (110, 80, 60), (60, 110, 90), (100, 70, 110),
    (120, 110, 60), (60, 90, 110), (110, 60, 80), (80, 100, 70),
]


class ReviewDeck:
    def __init__(self, names):
        self.names = list(names)
        self.reset()

    def reset(self):
        self.marked = [False] * len(self.names)
        self.index = 0
        self.finished = False

    @property
    def marked_names(self):
        return [n for n, m in zip(self.names, self.marked) if m]

    @property
    def kept_names(self):
        return [n for n, m in zip(self.names, self.marked) if not m]

    def attach(self, engine, on_blink=None):
        """
        Wires gesture callbacks to the deck.
        The camera image is not mirrored, so the classifier's LEFT (ear line
        rising to the image right) is the user tilting to their right.
        """
        engine.on_blink = on_blink or self.toggle_mark
        engine.on_tilt_left = self.next
        engine.on_tilt_right = self.prev
        return engine

    def toggle_mark(self):
        if self.finished or not (0 <= self.index < len(self.names)):
            return False
        self.marked[self.index] = not self.marked[self.index]
        return True

    def next(self):
        # Moving past the last photo ends the review.
        if self.finished or not self.names:
            return
        if self.index < len(self.names) - 1:
            self.index += 1
        else:
            self.finished = True

    def prev(self):
        if self.finished:
            return
        if self.index > 0:
            self.index -= 1

    def draw(self, screen, status_text, font_big, font_small, engine=None, preview=None, flash=False):
        screen.fill(BG)
        w, h = screen.get_size()

        if self.finished:
            self._draw_results(screen, font_big, font_small)
        elif self.names:
            self._draw_card(screen, font_big, font_small, flash)

        if preview is not None:
            pw, ph = preview.get_size()
            screen.blit(preview, (w - pw - 10, h - ph - 10))

        st = font_small.render(status_text, True, TEXT)
        screen.blit(st, (10, 10))

        if engine is not None:
            face = "face: yes" if engine.face_found else "face: NO"
            eyes = "eyes: CLOSED" if engine.is_blinking else "eyes: open"
            tilt = f"tilt: {USER_TILT[engine.head_tilt]}"
            info = f"{face}   {eyes}   {tilt}   blinks: {engine.blink_count}"
            screen.blit(font_small.render(info, True, TEXT), (10, 36))

            if engine.is_calibrating:
                left = engine.calibration.remaining
                msg = f"Calibrating: blink naturally {left} more time{'s' if left != 1 else ''}"
                screen.blit(font_small.render(msg, True, CURSOR), (10, 62))

            arrow = {Direction.LEFT: ">", Direction.RIGHT: "<"}.get(engine.head_tilt)
            if arrow:
                a = font_big.render(arrow, True, CURSOR)
                x = 20 if arrow == "<" else w - a.get_width() - 20
                screen.blit(a, (x, h / 2 - a.get_height() / 2))

    def _draw_card(self, screen, font_big, font_small, flash):
        w, h = screen.get_size()
        card_w, card_h = w * 0.55, h * 0.6
        rect = pygame.Rect((w - card_w) / 2, (h - card_h) / 2, card_w, card_h)

        color = CARD_COLORS[self.index % len(CARD_COLORS)]
        pygame.draw.rect(screen, (255, 255, 255) if flash else color, rect)

        border = MARKED if self.marked[self.index] else CURSOR
        pygame.draw.rect(screen, border, rect, 6)

        name = font_big.render(self.names[self.index], True, (240, 240, 240))
        screen.blit(name, (rect.centerx - name.get_width() / 2, rect.centery - name.get_height() / 2))

        if self.marked[self.index]:
            tag = font_small.render("MARKED FOR DELETION", True, MARKED)
            screen.blit(tag, (rect.centerx - tag.get_width() / 2, rect.bottom + 10))

        pos = font_small.render(f"{self.index + 1} / {len(self.names)}", True, TEXT)
        screen.blit(pos, (rect.centerx - pos.get_width() / 2, rect.top - 30))

    def _draw_results(self, screen, font_big, font_small):
        w, h = screen.get_size()
        title = font_big.render("Review done", True, (240, 240, 240))
        screen.blit(title, (w / 2 - title.get_width() / 2, h * 0.25))

        kept = font_small.render(f"Kept: {len(self.kept_names)}", True, KEPT)
        gone = font_small.render(f"Marked for deletion: {len(self.marked_names)}", True, MARKED)
        hint = font_small.render("Esc = start over, Q = quit", True, TEXT)
        screen.blit(kept, (w / 2 - kept.get_width() / 2, h * 0.45))
        screen.blit(gone, (w / 2 - gone.get_width() / 2, h * 0.45 + 30))
        screen.blit(hint, (w / 2 - hint.get_width() / 2, h * 0.45 + 80))
