# viewer.py
import dataclasses
import logging
import math
from pathlib import Path
from typing import Optional, Tuple

import pygame

from pathtracer.camera.camera import Camera
from pathtracer.config import ImageConfig, SceneConfig
from pathtracer.renderer.image_io import save_image
from pathtracer.renderer.raytracer import Renderer

logger = logging.getLogger(__name__)

QUALITY_LEVELS = {
    "interactive": {"samples": 1, "bounces": 4, "scale": 0.25},
    "balanced": {"samples": 4, "bounces": 8, "scale": 0.5},
    "high_quality": {"samples": 16, "bounces": 50, "scale": 1.0},
}

MAX_WINDOW = (1280, 720)


def window_size(width: int, height: int, max_size: Tuple[int, int] = MAX_WINDOW) -> Tuple[int, int]:
    """Largest size with the image's aspect ratio that fits in max_size."""
    factor = min(max_size[0] / width, max_size[1] / height, 1.0)
    return max(1, int(width * factor)), max(1, int(height * factor))


def preview_config(image: ImageConfig, window: Tuple[int, int], quality: str) -> ImageConfig:
    """Image configuration for one preview frame at the given quality level."""
    level = QUALITY_LEVELS[quality]
    return dataclasses.replace(
        image,
        width=max(2, int(window[0] * level["scale"])),
        height=max(2, int(window[1] * level["scale"])),
        samples_per_pixel=level["samples"],
        max_ray_depth=min(level["bounces"], image.max_ray_depth),
    )


class Viewer:
    """
    Interactive preview window. Every frame is rendered from scratch with the
    current camera; nothing is accumulated between frames.
    """
    def __init__(self, scene: SceneConfig, backend: str = "numba", workers: Optional[int] = None,
                 snapshot_dir: Path = Path(".")):
        pygame.init()

        self.scene = scene
        self.backend = backend
        self.workers = workers
        self.snapshot_dir = Path(snapshot_dir)

        self.window_width, self.window_height = window_size(scene.image.width, scene.image.height)
        self.screen = pygame.display.set_mode((self.window_width, self.window_height))
        pygame.display.set_caption("pathtracer")

        # Mouse control settings
        self.mouse_sensitivity = 0.003
        self.mouse_locked = False
        self.move_speed = 2.0

        self.camera = Camera.from_config(scene.camera, scene.image.aspect_ratio)
        self.current_quality = "interactive"
        self.renderer = self._make_renderer()

        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 24)
        self.frame = None
        self.snapshots = 0

    def _make_renderer(self) -> Renderer:
        config = preview_config(self.scene.image, (self.window_width, self.window_height),
                                self.current_quality)
        logger.info("Preview quality %s: %dx%d, %d spp", self.current_quality,
                    config.width, config.height, config.samples_per_pixel)
        return Renderer(config, seed=self.scene.seed, workers=self.workers, backend=self.backend)

    def set_quality(self, quality: str):
        if quality != self.current_quality:
            self.current_quality = quality
            self.renderer.close()
            self.renderer = self._make_renderer()

    def set_mouse_lock(self, locked: bool):
        self.mouse_locked = locked
        pygame.event.set_grab(locked)
        pygame.mouse.set_visible(not locked)
        pygame.mouse.get_rel()

    def handle_input(self, dt: float) -> bool:
        """
        Process held keys and mouse motion. Returns True if the camera changed.
        """
        moved = False
        keys = pygame.key.get_pressed()

        if self.mouse_locked:
            mouse_dx, mouse_dy = pygame.mouse.get_rel()
            if mouse_dx or mouse_dy:
                self.camera.rotate(mouse_dx * self.mouse_sensitivity,
                                   -mouse_dy * self.mouse_sensitivity)
                moved = True

        forward = (keys[pygame.K_w] - keys[pygame.K_s])
        right = (keys[pygame.K_d] - keys[pygame.K_a])
        up = (keys[pygame.K_SPACE] - keys[pygame.K_LSHIFT])
        if forward or right or up:
            norm = math.sqrt(forward * forward + right * right + up * up)
            step = self.move_speed * dt / norm
            self.camera.move(forward * step, right * step, up * step)
            moved = True

        return moved

    def save_snapshot(self):
        if self.frame is None:
            return
        path = self.snapshot_dir / f"frame_{self.snapshots:04d}.png"
        save_image(self.frame, path)
        self.snapshots += 1

    def draw(self):
        # surfarray is indexed (x, y); the buffer is (row, column)
        surface = pygame.surfarray.make_surface(self.frame.swapaxes(0, 1))
        if surface.get_size() != (self.window_width, self.window_height):
            surface = pygame.transform.scale(surface, (self.window_width, self.window_height))
        self.screen.blit(surface, (0, 0))

        text = self.font.render(
            f"FPS: {self.clock.get_fps():.1f} | Quality: {self.current_quality} (1/2/3)",
            True, (255, 255, 255))
        self.screen.blit(text, (10, 10))
        pygame.display.flip()

    def run(self):
        quality_keys = {
            pygame.K_1: "interactive",
            pygame.K_2: "balanced",
            pygame.K_3: "high_quality",
        }
        running = True
        try:
            while running:
                dt = self.clock.tick(60) / 1000.0

                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.KEYDOWN:
                        if event.key == pygame.K_ESCAPE:
                            running = False
                        elif event.key == pygame.K_TAB:
                            self.set_mouse_lock(not self.mouse_locked)
                        elif event.key == pygame.K_p:
                            self.save_snapshot()
                        elif event.key in quality_keys:
                            self.set_quality(quality_keys[event.key])

                self.handle_input(dt)
                self.frame = self.renderer.render_frame(self.camera, self.scene.world)
                self.draw()
        finally:
            self.renderer.close()
            pygame.quit()
