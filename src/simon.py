#!/usr/bin/env python3
"""
Simon Memory Game

Main application: wires buttons, tone/vibration feedback and the game
session together and runs the frame loop.
"""

import argparse
import logging
import os
import signal
import sys
from pathlib import Path
from typing import List, Optional

# Add src to path for imports when run as a script
sys.path.insert(0, str(Path(__file__).parent))

from audio_system import GPIOHapticMotor, MockSoundController, SoundController
from button_system import ButtonReader, GPIOSampler, KeyboardSampler
from game_system import (
    FrameScheduler,
    GameManager,
    GameSession,
    JsonSettingsStore,
    RandomSignalSource,
)
from game_system.config import AudioConfig, ButtonConfig, ButtonLayout, GameConfig
from utils import HybridLogger

# Global logger reference for signal handlers
_global_logger = None


def emergency_flush_and_log(sig=None, frame=None):
    """Flush logs before the process goes away"""
    if _global_logger:
        if sig:
            _global_logger.critical(f"⚠️  SIGNAL RECEIVED: {sig} - Process terminating")
        _global_logger.flush()

    if sig == signal.SIGTERM or sig == signal.SIGHUP:
        # Unwinds through GameManager.stop() like Ctrl+C does
        raise KeyboardInterrupt


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simon memory game")
    parser.add_argument("--keyboard", action="store_true",
                        help="Use digit keys instead of GPIO buttons")
    parser.add_argument("--mock-audio", action="store_true",
                        help="Do not open the audio device")
    parser.add_argument("--settings-file", default=None,
                        help="JSON file holding high score and settings")
    parser.add_argument("--sounds-folder", default=None,
                        help="Folder with the tone files")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the random sequence")
    parser.add_argument("--no-startup-animation", action="store_true",
                        help="Start the first game immediately")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level of the game components")
    return parser.parse_args(argv)


def create_simon_config(args: Optional[argparse.Namespace] = None) -> GameConfig:
    """Default hardware configuration, with command line overrides applied"""

    button_config = ButtonConfig(
        pins=[
            17,  # GREEN
            27,  # RED
            22,  # YELLOW
            23,  # BLUE
            24,  # START
            25,  # SETTINGS
            5,   # PAUSE
        ],
        pull_mode="up",
        sample_rate_hz=200
    )

    audio_config = AudioConfig(
        sounds_folder="sounds",
        file_extension="wav",
        volume=0.8,
        haptic_pin=18,
        haptic_pulse_ms=100
    )

    config = GameConfig(
        button_config=button_config,
        layout=ButtonLayout(),
        audio_config=audio_config,
        frame_duration_ms=20,  # 50 FPS
        settings_file="simon_settings.json"
    )

    if args is not None:
        if args.settings_file:
            config.settings_file = args.settings_file
        if args.sounds_folder:
            config.audio_config.sounds_folder = args.sounds_folder
        if args.seed is not None:
            config.seed = args.seed
        if args.no_startup_animation:
            config.play_startup_animation = False
        if args.keyboard:
            # No GPIO at all, including the vibration motor
            config.audio_config.haptic_pin = None

    return config


def create_game_system(config: GameConfig,
                       simon_logger,
                       use_keyboard: bool = False,
                       use_mock_audio: bool = False,
                       level: int = logging.INFO) -> GameManager:
    """
    Create and configure the complete game system.

    Args:
        config: GameConfig instance with all system configuration
        simon_logger: ClassLogger instance for logging initialization steps
        use_keyboard: Read buttons from the terminal instead of GPIO
        use_mock_audio: Use MockSoundController instead of pygame
        level: Log level for the component loggers

    Returns:
        GameManager: Configured game manager ready to run
    """
    config.validate()

    game_manager_logger = simon_logger.create_class_logger("GameManager", level)
    session_logger = simon_logger.create_class_logger("GameSession", level)
    button_reader_logger = simon_logger.create_class_logger("ButtonReader", level)
    sound_controller_logger = simon_logger.create_class_logger("SoundController", level)
    settings_logger = simon_logger.create_class_logger("SettingsStore", level)

    try:
        scheduler = FrameScheduler(logger=game_manager_logger)

        if use_keyboard:
            button_sampler = KeyboardSampler(num_buttons=config.layout.button_count, logger=button_reader_logger)
        else:
            button_sampler = GPIOSampler(
                button_pins=config.button_config.pins,
                pull_mode=config.button_config.pull_mode,
                logger=button_reader_logger
            )

        labels = {index: signal_.name for index, signal_ in config.layout.signal_buttons.items()}
        labels.update({index: name.upper() for name, index in config.layout.control_buttons().items()})
        button_reader = ButtonReader(sampler=button_sampler, logger=button_reader_logger, labels=labels)

        audio = config.audio_config
        if use_mock_audio:
            simon_logger.info("🔇 Using MockSoundController (audio hardware disabled)")
            feedback = MockSoundController(logger=sound_controller_logger)
        else:
            haptic = None
            if audio.haptic_pin is not None:
                haptic = GPIOHapticMotor(audio.haptic_pin, scheduler, sound_controller_logger)
                haptic.setup()
            feedback = SoundController(
                sounds_folder=audio.sounds_folder,
                logger=sound_controller_logger,
                file_extension=audio.file_extension,
                volume=audio.volume,
                haptic=haptic,
                haptic_pulse_ms=audio.haptic_pulse_ms
            )
            tones, error_tones = feedback.get_loaded_counts()
            simon_logger.info(f"Audio system: {tones} tones, {error_tones} error tones loaded")

        session = GameSession(
            scheduler=scheduler,
            feedback=feedback,
            settings_store=JsonSettingsStore(config.settings_file, settings_logger),
            logger=session_logger,
            signal_source=RandomSignalSource(config.seed),
            timings=config.timings,
            play_startup_animation=config.play_startup_animation
        )

        game_manager = GameManager(
            session=session,
            button_reader=button_reader,
            scheduler=scheduler,
            layout=config.layout,
            logger=game_manager_logger,
            frame_duration_ms=config.frame_duration_ms
        )

        simon_logger.info("Simon system initialized successfully")
        simon_logger.info(f"Hardware: {button_reader.get_button_count()} buttons, "
                          f"{config.frame_duration_ms}ms frame duration")

        return game_manager

    except Exception as e:
        simon_logger.error(f"Failed to initialize Simon system: {e}", exception=e)
        raise


def main(argv: Optional[List[str]] = None):
    """
    Main function - sets up and runs the Simon game.
    """
    args = parse_args(argv)
    level = getattr(logging, args.log_level)

    if not args.mock_audio:
        # Force ALSA (USB sound card) unless the environment says otherwise
        os.environ.setdefault('SDL_AUDIODRIVER', 'alsa')

    main_logger = HybridLogger("SimonGame")
    simon_logger = main_logger.get_class_logger("Simon", level)

    global _global_logger
    _global_logger = simon_logger
    signal.signal(signal.SIGTERM, emergency_flush_and_log)
    signal.signal(signal.SIGHUP, emergency_flush_and_log)

    simon_logger.info("🎮 SIMON MEMORY GAME")

    config = create_simon_config(args)

    input_name = "keyboard" if args.keyboard else f"GPIO {config.button_config.pins}"
    simon_logger.info(f"Button configuration: {config.button_count} buttons on {input_name}")
    simon_logger.info(f"Game settings: {config.frame_duration_ms}ms frame duration ({config.target_fps:.1f} FPS)")
    simon_logger.info(f"Sounds folder: {config.audio_config.sounds_folder}")
    simon_logger.info(f"Settings file: {config.settings_file}")

    try:
        game_manager = create_game_system(
            config,
            simon_logger,
            use_keyboard=args.keyboard,
            use_mock_audio=args.mock_audio,
            level=level
        )

        simon_logger.info("===========================")
        simon_logger.info("🚀 Starting Simon...")

        game_manager.run_game_loop()

    except KeyboardInterrupt:
        simon_logger.info("⏹️  Simon stopped by user")
    except Exception as e:
        simon_logger.error(f"Simon system error: {e}", exception=e)
        raise
    finally:
        simon_logger.info("✅ Simon shut down")
        simon_logger.flush()
        main_logger.cleanup()


if __name__ == "__main__":
    main()
