"""ImageRegistry: the single owner-gated slot naming the trusted engine build.

Kept apart from the ledger's signal so the engine can be upgraded
without discarding the last accepted signal.  A rotation takes effect
immediately: seals bound to the old id stop verifying at once.
"""

from __future__ import annotations

import logging

from zksignal.ledger.errors import AccessControlError, InvalidImageId

log = logging.getLogger(__name__)

IMAGE_ID_SIZE = 32


def parse_image_id(value: bytes | str) -> bytes:
    """Accept 32 raw bytes or 64 hex characters (``0x`` prefix optional)."""
    if isinstance(value, str):
        text = value[2:] if value.lower().startswith("0x") else value
        try:
            value = bytes.fromhex(text)
        except ValueError as exc:
            raise InvalidImageId(f"image id is not valid hex: {value!r}") from exc
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidImageId(f"image id must be bytes or hex str, got {type(value).__name__}")
    if len(value) != IMAGE_ID_SIZE:
        raise InvalidImageId(f"image id must be {IMAGE_ID_SIZE} bytes, got {len(value)}")
    return bytes(value)


class ImageRegistry:
    """Owner-gated holder of the trusted image id.

    Parameters
    ----------
    image_id : bytes | str
        Initial trusted image id.
    owner : str
        Only this caller may rotate the id or hand over ownership.
    """

    def __init__(self, image_id: bytes | str, owner: str) -> None:
        if not owner:
            raise ValueError("owner must be a non-empty string")
        self._image_id = parse_image_id(image_id)
        self._owner = owner

    @property
    def image_id(self) -> bytes:
        return self._image_id

    @property
    def owner(self) -> str:
        return self._owner

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner:
            log.warning("Rejected privileged call from %r (owner is %r)", caller, self._owner)
            raise AccessControlError(f"caller {caller!r} is not the owner")

    def set_image_id(self, image_id: bytes | str, caller: str) -> bytes:
        """Replace the trusted id.  Returns the new id."""
        self._require_owner(caller)
        new_id = parse_image_id(image_id)
        log.info("Image id %s -> %s", self._image_id.hex(), new_id.hex())
        self._image_id = new_id
        return new_id

    def transfer_ownership(self, new_owner: str, caller: str) -> None:
        self._require_owner(caller)
        if not new_owner:
            raise ValueError("new_owner must be a non-empty string")
        log.info("Ownership %r -> %r", self._owner, new_owner)
        self._owner = new_owner
