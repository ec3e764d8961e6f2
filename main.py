import logging
import time

import cv2
import pygame

import config as cfg
from face_controller import FaceController, draw_eye_points
from gesture_engine import GestureEngine
from review_deck import ReviewDeck

log = logging.getLogger("blink_review")

PREVIEW_SIZE = (240, 180)


def make_preview(engine):
    # Small camera preview with the EAR landmarks drawn on it.
    img = engine.last_image
    if img is None:
        return None
    img = img.copy()
    if engine.last_frame is not None:
        draw_eye_points(img, engine.last_frame)
    rgb = cv2.cvtColor(cv2.resize(img, PREVIEW_SIZE), cv2.COLOR_BGR2RGB)
    return pygame.image.frombuffer(rgb.tobytes(), PREVIEW_SIZE, "RGB")


def main():
    logging.basicConfig(level=logging.INFO, format=cfg.LOG_FORMAT)

    pygame.init()
    screen = pygame.display.set_mode((cfg.WIN_W, cfg.WIN_H))
    pygame.display.set_caption(cfg.TITLE)
    clock = pygame.time.Clock()
    font_big = pygame.font.SysFont(None, 90)
    font_small = pygame.font.SysFont(None, 26)

    deck = ReviewDeck([f"photo-{i + 1}" for i in range(cfg.DEMO_PHOTO_COUNT)])
    flash_until = 0.0

    def on_blink():
        nonlocal flash_until
        flash_until = time.time() + cfg.FLASH_SECONDS
        deck.toggle_mark()

    engine = GestureEngine(
        config=cfg.load_config(),
        pump_factory=FaceController,
        on_calibration_complete=lambda: log.info("Ready: blink to mark, tilt to navigate"),
    )
    deck.attach(engine, on_blink=on_blink)

    if engine.start():
        status = "Blink 3 times to calibrate (S = skip)."
    else:
        status = f"{engine.error} Use arrow keys and SPACE instead."

    running = True
    while running:
        # The clock is the pump throttle: one frame per 1 / FPS seconds.
        clock.tick(cfg.FPS)
        now = time.time()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            if event.type != pygame.KEYDOWN:
                continue

            if event.key == pygame.K_q:
                running = False
            elif event.key == pygame.K_s and engine.is_calibrating:
                engine.skip_calibration()
                status = "Calibration skipped."
            elif event.key == pygame.K_r:
                engine.reset_counts()
                status = "Counts reset."
            elif event.key == pygame.K_ESCAPE:
                deck.reset()
                if engine.start():
                    status = "Started over. Blink 3 times to calibrate (S = skip)."
                else:
                    status = f"{engine.error} Use arrow keys and SPACE instead."
            elif engine.is_calibrating or deck.finished:
                continue
            elif event.key == pygame.K_LEFT:
                deck.prev()
            elif event.key == pygame.K_RIGHT:
                deck.next()
            elif event.key in (pygame.K_SPACE, pygame.K_d):
                deck.toggle_mark()

        if engine.is_running and not deck.finished:
            was_calibrating = engine.is_calibrating
            result = engine.poll()
            if result is None and engine.pump is not None:
                status = "Webcam read failed."
            elif result is not None and not result.face_found:
                status = "No face detected. Center yourself."
            elif was_calibrating and not engine.is_calibrating:
                status = "Calibrated. BLINK=mark, tilt RIGHT=next, tilt LEFT=back."
            elif engine.is_calibrating:
                status = "Blink 3 times to calibrate (S = skip)."
            elif not status.startswith("Calibrated"):
                status = "BLINK=mark, tilt RIGHT=next, tilt LEFT=back."

        if deck.finished and engine.is_running:
            engine.stop()
            log.info("Review done: %d kept, %d marked", len(deck.kept_names), len(deck.marked_names))
            status = "Review finished."

        deck.draw(screen, status, font_big, font_small, engine=engine,
                  preview=make_preview(engine), flash=now < flash_until)
        pygame.display.flip()

    engine.stop()
    pygame.quit()


if __name__ == "__main__":
    main()
