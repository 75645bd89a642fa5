"""Output formats a client can request"""
from enum import Enum
from typing import Optional

# Plain HTTP(S) downloads only: no HLS playlists or DASH segment lists
DIRECT = "[protocol^=http][protocol!*=dash]"


class OutputFormat(str, Enum):
    AUDIO_ONLY = "audioonly"
    VIDEO_AND_AUDIO = "videoandaudio"

    @classmethod
    def parse(cls, value: Optional[str]) -> "OutputFormat":
        """Anything other than the audio-only token means combined output"""
        if value == cls.AUDIO_ONLY.value:
            return cls.AUDIO_ONLY
        return cls.VIDEO_AND_AUDIO

    @property
    def extension(self) -> str:
        return "mp3" if self is OutputFormat.AUDIO_ONLY else "mp4"

    @property
    def selector(self) -> str:
        """yt-dlp format selector; combined output sticks to progressive streams"""
        if self is OutputFormat.AUDIO_ONLY:
            return f"bestaudio{DIRECT}/best{DIRECT}"
        return f"best[ext=mp4]{DIRECT}/best{DIRECT}"
