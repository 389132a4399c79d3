"""
Pygame frontend for the CHIP-8 interpreter
"""

import numpy as np
import pygame
import hydra
from omegaconf import DictConfig, OmegaConf

from chip8vm import Interpreter, InterpreterConfig, Chip8Error, SCREEN_WIDTH, SCREEN_HEIGHT
from chip8vm.logging import logger, ConsoleCallback, ProgressCallback, OpcodeStatsCallback, RunLogger
from chip8vm.rendering import chip8_display_to_rgb, chip8_display_to_argb, create_color_scheme

# 1234/QWER/ASDF/ZXCV laid over the hex keypad 123C/456D/789E/A0BF
KEY_MAP = {
    pygame.K_x: 0x0, pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_a: 0x7,
    pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_z: 0xA, pygame.K_c: 0xB,
    pygame.K_4: 0xC, pygame.K_r: 0xD, pygame.K_f: 0xE, pygame.K_v: 0xF,
}


def make_tone(frequency: int, duration_ms: int, volume: float, sample_rate: int = 44100):
    """Square wave beep played when the sound timer runs out."""
    samples = int(sample_rate * duration_ms / 1000)
    t = np.arange(samples) / sample_rate
    wave = np.where(np.sin(2 * np.pi * frequency * t) >= 0, 1.0, -1.0)
    return pygame.sndarray.make_sound((wave * volume * 32767).astype(np.int16))


def render_frame(interpreter: Interpreter, cfg: DictConfig) -> np.ndarray:
    """RGB frame of shape (height, width, 3) for the current display."""
    if cfg.gradient:
        words = chip8_display_to_argb(interpreter.state.display).reshape(SCREEN_HEIGHT, SCREEN_WIDTH)
        frame = np.stack([(words >> 16) & 0xFF, (words >> 8) & 0xFF, words & 0xFF], axis=-1).astype(np.uint8)
        return np.repeat(np.repeat(frame, cfg.scale, axis=0), cfg.scale, axis=1)
    on_color, off_color = create_color_scheme(cfg.color_scheme)
    return chip8_display_to_rgb(interpreter.state.display, cfg.scale, on_color, off_color)


def run_headless(interpreter: Interpreter, cfg: DictConfig):
    """Run a fixed number of cycles without a window."""
    run_logger = RunLogger(log_level=cfg.log_level)
    stats = OpcodeStatsCallback(logger=run_logger)
    callbacks = [ConsoleCallback(log_interval=max(1, cfg.cycles // 10), logger=run_logger), stats]
    if cfg.progress:
        callbacks.append(ProgressCallback())
    try:
        interpreter.run(cfg.cycles, callbacks)
    except Chip8Error as e:
        logger.error(f"Run stopped: {e}")


def run_emulator(interpreter: Interpreter, cfg: DictConfig):
    """Main emulator loop: ``ipf`` instructions and one timer tick per frame."""
    pygame.mixer.pre_init(44100, -16, 1)
    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * cfg.scale, SCREEN_HEIGHT * cfg.scale))
    pygame.display.set_caption("CHIP-8")
    clock = pygame.time.Clock()

    try:
        tone = make_tone(cfg.tone_hz, cfg.tone_ms, cfg.volume)
        interpreter.add_tone_listener(tone.play)
    except pygame.error as e:
        logger.warning(f"Audio disabled: {e}")

    running = True
    paused = False
    logger.info("Controls: ESC=Quit, P=Pause, R=Reset")

    while running:
        clock.tick(cfg.fps)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key == pygame.K_r:
                    interpreter.reset()
                    paused = False
                    screen.fill((0, 0, 0))
                    pygame.display.flip()
                    logger.info("Reset")
                elif event.key in KEY_MAP:
                    interpreter.set_key(KEY_MAP[event.key], True)
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    interpreter.set_key(KEY_MAP[event.key], False)

        if not paused:
            interpreter.tick_timers()
            for _ in range(cfg.ipf):
                try:
                    interpreter.step()
                except Chip8Error as e:
                    logger.error(f"Emulation halted at PC=0x{int(interpreter.state.pc):03X}: {e}")
                    paused = True
                    break

        if interpreter.consume_redraw():
            frame = render_frame(interpreter, cfg)
            surface = pygame.surfarray.make_surface(frame.transpose(1, 0, 2))
            screen.blit(surface, (0, 0))
            pygame.display.flip()

    pygame.quit()


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    logger.set_level(cfg.log_level)
    logger.debug(OmegaConf.to_yaml(cfg))

    interpreter = Interpreter(InterpreterConfig(
        seed=cfg.seed,
        strict_opcodes=cfg.strict_opcodes,
        timer_mode="cycle" if cfg.headless else "host",
    ))
    try:
        interpreter.load_rom(cfg.rom)
    except (OSError, Chip8Error) as e:
        logger.error(f"Could not load {cfg.rom}: {e}")
        return
    logger.info(f"Loaded: {cfg.rom}")

    if cfg.headless:
        run_headless(interpreter, cfg)
    else:
        run_emulator(interpreter, cfg)


if __name__ == "__main__":
    main()
