"""
macOS реализация перечисления и переключения устройств
"""

from .switchaudio_bridge import SwitchAudioBridge

__all__ = ["SwitchAudioBridge"]
