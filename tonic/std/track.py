from pathlib import Path
from typing import Any, List, Union

from tonic.errors import TonicError, ErrorVal
from tonic.types import ArrayVal, SoundVal, classify


DEFAULT_TEMPO = 220
SENTINEL = 'x'
MAX_TRACK = 15


def serialize(value: Any) -> str:
    """Render a sound, or an array nested down to sounds, for the track file."""
    if isinstance(value, SoundVal):
        return f"[{', '.join(value.pitches)}]:{value.duration!r}:{value.amplitude}"
    if isinstance(value, ArrayVal):
        return '[' + ','.join(serialize(item) for item in value.items) + ']'
    raise TonicError(ErrorVal('NotMixable', f'cannot mix down a value of type {classify(value)}'))


class TrackEmitter:
    """Owns the track file plus the tempo and "has a track been written" state.

    Every run starts with `reset`. Until the first successful mixdown the
    file holds only the sentinel line; the first mixdown truncates it and
    writes the tempo followed by the track, later ones append a line each.
    """
    def __init__(self, path: Union[str, Path], tempo: int = DEFAULT_TEMPO):
        self.path = Path(path)
        self.default_tempo = tempo
        self.tempo = tempo
        self.has_emitted = False

    def reset(self) -> None:
        """Write the sentinel and forget any tempo change or earlier mixdown."""
        self.tempo = self.default_tempo
        self.has_emitted = False
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(SENTINEL + '\n')

    def set_tempo(self, tempo: int) -> None:
        if self.has_emitted:
            raise TonicError(ErrorVal('InvalidOperation', 'bpm cannot be changed after the first mixdown'))
        self.tempo = tempo

    def mixdown(self, args: List[Any]) -> int:
        if len(args) not in (1, 2):
            self._invalid(f'mixdown expects 1 or 2 arguments, got {len(args)}')
        track = 0
        if len(args) == 2:
            track = args[1]
            if classify(track) != 'int':
                self._invalid(f'mixdown track number must be int, got {classify(track)}')
            if track < 0 or track > MAX_TRACK:
                self._invalid(f'mixdown track number {track} is outside 0..{MAX_TRACK}')
        line = f"{track}{serialize(args[0])}"
        if not self.has_emitted:
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(f"{self.tempo}\n{line}\n")
            self.has_emitted = True
        else:
            with open(self.path, 'a', encoding='utf-8') as f:
                f.write(line + '\n')
        print(f"Track {track} mixed down")
        return track

    def _invalid(self, message: str):
        self.reset()
        raise TonicError(ErrorVal('InvalidMixdownArgs', message))
