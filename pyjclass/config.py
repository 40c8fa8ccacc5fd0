"""
Decoder configuration.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DecoderConfig:
    """Options for a single decode.

    verify_magic: reject buffers that do not start with 0xCAFEBABE.
        Off by default; checking the magic is the caller's job.
    upgrade_attributes: turn raw attributes into their typed form while
        decoding. When off the model keeps raw attributes and the member
        accessors upgrade them on demand.
    verbose: log every constant pool entry at DEBUG level.
    """
    verify_magic: bool = False
    upgrade_attributes: bool = True
    verbose: bool = False


DEFAULT_CONFIG = DecoderConfig()
