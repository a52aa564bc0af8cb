from solders.pubkey import Pubkey

from .errors import ConfigurationError

MAX_SEEDS = 16


def parse_pubkey(value, label="public key"):
    try:
        return Pubkey.from_string(value)
    except Exception as e:
        raise ConfigurationError(f"Invalid {label}: {value}") from e


def derive_authority(program_id, seeds, include_program_id=True):
    """Program-derived address usable as a new upgrade authority.

    Seeds are UTF-8 encoded in the order given; the program id bytes are appended
    as the last seed unless include_program_id is False.
    """
    program_pubkey = parse_pubkey(program_id, "program id")
    seed_bytes = [bytes(seed, "UTF-8") for seed in seeds]
    if include_program_id:
        seed_bytes.append(bytes(program_pubkey))
    if not seed_bytes:
        raise ConfigurationError("At least one seed is required to derive an authority.")
    # the bump seed takes the last of the MAX_SEEDS slots
    if len(seed_bytes) >= MAX_SEEDS:
        raise ConfigurationError(f"At most {MAX_SEEDS - 1} seeds are allowed, got {len(seed_bytes)}.")
    for seed in seed_bytes:
        if len(seed) > 32:
            raise ConfigurationError(f"Seed longer than 32 bytes: {seed!r}")
    address, bump = Pubkey.find_program_address(seed_bytes, program_pubkey)
    return address, bump
