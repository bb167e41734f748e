import random
from typing import Any, Dict, List

from tonic.builtin_function import BuiltinFunction
from tonic.errors import TonicError, ErrorVal
from tonic.types import ArrayVal, PitchVal, SoundVal, classify, to_string
from .track import TrackEmitter


def _expect(name: str, value: Any, *tags: str) -> Any:
    if classify(value) not in tags:
        raise TonicError(ErrorVal('WrongArgumentType', f"{name} expects {' or '.join(tags)}, got {classify(value)}"))
    return value


def populate_standard_library(track: TrackEmitter, rng: random.Random) -> Dict[str, BuiltinFunction]:
    """Build the built-in function table, keyed by name.

    Built-ins are matched before user functions, so a user function that
    shares a name with one of these is never called.
    """

    def std_print(args: List[Any]) -> Any:
        print(to_string(args[0]))
        return 0

    def std_get_amplitude(args: List[Any]) -> Any:
        return _expect('getAmplitude', args[0], 'sound').amplitude

    def std_get_duration(args: List[Any]) -> Any:
        return _expect('getDuration', args[0], 'sound').duration

    def std_get_pitches(args: List[Any]) -> Any:
        value = _expect('getPitches', args[0], 'sound', 'pitch')
        if isinstance(value, PitchVal):
            return ArrayVal((value,))
        if not value.pitches:
            raise TonicError(ErrorVal('EmptyArrayLiteral', 'sound has no pitches'))
        return ArrayVal(tuple(PitchVal(p) for p in value.pitches))

    def std_set_amplitude(args: List[Any]) -> Any:
        sound = _expect('setAmplitude', args[0], 'sound')
        amplitude = _expect('setAmplitude', args[1], 'int')
        return SoundVal(sound.pitches, sound.duration, amplitude)

    def std_set_duration(args: List[Any]) -> Any:
        sound = _expect('setDuration', args[0], 'sound')
        duration = _expect('setDuration', args[1], 'double')
        return SoundVal(sound.pitches, duration, sound.amplitude)

    def std_set_pitches(args: List[Any]) -> Any:
        sound = _expect('setPitches', args[0], 'sound')
        pitches = _expect('setPitches', args[1], 'array')
        if pitches.elem_tag != 'pitch':
            raise TonicError(ErrorVal('WrongArgumentType', f'setPitches expects an array of pitch, got array of {pitches.elem_tag}'))
        return SoundVal(tuple(p.name for p in pitches.items), sound.duration, sound.amplitude)

    def std_random_int(args: List[Any]) -> Any:
        bound = _expect('randomInt', args[0], 'int')
        if bound <= 0:
            raise TonicError(ErrorVal('WrongArgumentType', f'randomInt bound must be positive, got {bound}'))
        return rng.randrange(bound)

    def std_random_double(args: List[Any]) -> Any:
        bound = _expect('randomDouble', args[0], 'double')
        if bound <= 0:
            raise TonicError(ErrorVal('WrongArgumentType', f'randomDouble bound must be positive, got {bound!r}'))
        return rng.random() * bound

    def std_length(args: List[Any]) -> Any:
        return len(_expect('length', args[0], 'array'))

    def std_bpm(args: List[Any]) -> Any:
        tempo = _expect('bpm', args[0], 'int')
        if tempo <= 0:
            raise TonicError(ErrorVal('WrongArgumentType', f'bpm expects a positive tempo, got {tempo}'))
        track.set_tempo(tempo)
        return 0

    def std_mixdown(args: List[Any]) -> Any:
        track.mixdown(args)
        return 0

    return {
        'print': BuiltinFunction('print', 1, std_print),
        'getAmplitude': BuiltinFunction('getAmplitude', 1, std_get_amplitude),
        'getDuration': BuiltinFunction('getDuration', 1, std_get_duration),
        'getPitches': BuiltinFunction('getPitches', 1, std_get_pitches),
        'setAmplitude': BuiltinFunction('setAmplitude', 2, std_set_amplitude),
        'setDuration': BuiltinFunction('setDuration', 2, std_set_duration),
        'setPitches': BuiltinFunction('setPitches', 2, std_set_pitches),
        'randomInt': BuiltinFunction('randomInt', 1, std_random_int),
        'randomDouble': BuiltinFunction('randomDouble', 1, std_random_double),
        'length': BuiltinFunction('length', 1, std_length),
        'bpm': BuiltinFunction('bpm', 1, std_bpm),
        'mixdown': BuiltinFunction('mixdown', None, std_mixdown),
    }
