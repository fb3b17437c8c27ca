# SPDX-License-Identifier: BSD-2
"""Marshaling of TPM 1.2 buffer headers and authorization blocks.

A TPM 1.2 response is laid out as::

    tag (2) | paramSize (4) | returnCode (4) | parameters | auth blocks

with zero, one or two authorization blocks at the very end depending on the
tag. Commands are the same with the ordinal in place of the return code.
"""
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from .constants import (
    TPM_TAG,
    TPM_RC,
    TPM_INT_MU,
    TPM_U16_SIZE,
    TPM_U32_SIZE,
    TPM_HASH_SIZE,
    TPM_NONCE_SIZE,
    TPM_HEADER_SIZE,
    TPM_RESPONSE_AUTH_SIZE,
    TPM_COMMAND_AUTH_SIZE,
    TSS_RC,
)
from .TPM_Exception import ProtocolError

BytesLike = Union[bytes, bytearray, memoryview]


class UINT8(int, TPM_INT_MU):
    """Represents an unsigned 8-bit integer."""

    _SIZE = 1


class UINT16(int, TPM_INT_MU):
    """Represents an unsigned 16-bit integer."""

    _SIZE = TPM_U16_SIZE


class UINT32(int, TPM_INT_MU):
    """Represents an unsigned 32-bit integer."""

    _SIZE = TPM_U32_SIZE


def check_range(buffer: BytesLike, offset: int, length: int) -> None:
    """Make sure buffer[offset:offset + length] lies inside buffer.

    Raises:
        ProtocolError: If the range is negative or runs past the end of buffer.
    """
    if offset < 0 or length < 0 or offset + length > len(buffer):
        raise ProtocolError(
            TSS_RC.BAD_SIZE,
            f"range {offset}+{length} outside of a {len(buffer)} byte buffer",
        )


def continue_session_byte(continue_session: Union[bool, int]) -> bytes:
    """Encode the continueAuthSession flag as the single byte that is hashed.

    Raises:
        ValueError: If the flag does not fit in one byte.
    """
    if isinstance(continue_session, bool):
        return b"\x01" if continue_session else b"\x00"
    if not isinstance(continue_session, int):
        raise TypeError(
            f"Expected continue_session to be a bool or int, got: {type(continue_session).__name__}"
        )
    if continue_session < 0 or continue_session > 0xFF:
        raise ValueError(
            f"continue_session must fit in one byte, got: {continue_session}"
        )
    return UINT8(continue_session).marshal()


@dataclass
class tpm_response_auth:
    """Represents the authorization block trailing a response."""

    nonce: bytes
    continue_session: int
    hmac: bytes

    def marshal(self) -> bytes:
        if len(self.nonce) != TPM_NONCE_SIZE or len(self.hmac) != TPM_HASH_SIZE:
            raise ValueError(
                f"expected a {TPM_NONCE_SIZE} byte nonce and a {TPM_HASH_SIZE} byte hmac"
            )
        return (
            bytes(self.nonce)
            + continue_session_byte(self.continue_session)
            + bytes(self.hmac)
        )

    @classmethod
    def unmarshal(cls, buf: BytesLike) -> Tuple["tpm_response_auth", int]:
        check_range(buf, 0, TPM_RESPONSE_AUTH_SIZE)
        nonce = bytes(buf[0:TPM_NONCE_SIZE])
        continue_session = buf[TPM_NONCE_SIZE]
        hmac = bytes(buf[TPM_NONCE_SIZE + 1 : TPM_RESPONSE_AUTH_SIZE])
        return cls(nonce, continue_session, hmac), TPM_RESPONSE_AUTH_SIZE


@dataclass
class tpm_command_auth:
    """Represents the authorization block trailing a command."""

    handle: int
    nonce: bytes
    continue_session: int
    hmac: bytes

    def marshal(self) -> bytes:
        if len(self.nonce) != TPM_NONCE_SIZE or len(self.hmac) != TPM_HASH_SIZE:
            raise ValueError(
                f"expected a {TPM_NONCE_SIZE} byte nonce and a {TPM_HASH_SIZE} byte hmac"
            )
        return (
            UINT32(self.handle).marshal()
            + bytes(self.nonce)
            + continue_session_byte(self.continue_session)
            + bytes(self.hmac)
        )

    @classmethod
    def unmarshal(cls, buf: BytesLike) -> Tuple["tpm_command_auth", int]:
        check_range(buf, 0, TPM_COMMAND_AUTH_SIZE)
        handle, off = UINT32.unmarshal(buf)
        nonce = bytes(buf[off : off + TPM_NONCE_SIZE])
        off += TPM_NONCE_SIZE
        continue_session = buf[off]
        off += 1
        hmac = bytes(buf[off : off + TPM_HASH_SIZE])
        return cls(handle, nonce, continue_session, hmac), TPM_COMMAND_AUTH_SIZE


def read_response_header(buffer: BytesLike) -> Tuple[TPM_TAG, int, TPM_RC]:
    """Read the response header.

    Args:
        buffer (bytes): The raw response.

    Returns:
        A tuple containing the tag (TPM_TAG), the size field (int) and the return code (TPM_RC).

    Raises:
        ProtocolError: If the buffer is shorter than the header.
    """
    check_range(buffer, 0, TPM_HEADER_SIZE)
    off = 0
    tag, suboff = TPM_TAG.unmarshal(buffer[off:])
    off += suboff
    size, suboff = UINT32.unmarshal(buffer[off:])
    off += suboff
    rc, _ = TPM_RC.unmarshal(buffer[off:])
    return tag, int(size), rc


def auth_area_offset(buffer: BytesLike, tag: int) -> int:
    """Return where the trailing authorization blocks start.

    The size field must match the length of the buffer and leave room for the
    header and every block the tag announces.

    Raises:
        ProtocolError: If the tag is unknown or the sizes are inconsistent.
    """
    try:
        count = TPM_TAG.auth_count(tag)
    except ValueError as e:
        raise ProtocolError(TSS_RC.BAD_TAG, str(e))
    _, size, _ = read_response_header(buffer)
    if size != len(buffer):
        raise ProtocolError(
            TSS_RC.BAD_SIZE,
            f"size field is {size} but the buffer holds {len(buffer)} bytes",
        )
    offset = size - count * TPM_RESPONSE_AUTH_SIZE
    if offset < TPM_HEADER_SIZE:
        raise ProtocolError(
            TSS_RC.BAD_SIZE,
            f"{size} bytes cannot hold {count} authorization block(s)",
        )
    return offset


def read_response_auths(buffer: BytesLike) -> Sequence[tpm_response_auth]:
    """Get the authorization blocks from a response.

    Args:
        buffer (bytes): The raw response.

    Returns:
        A sequence containing `tpm_response_auth`, empty for an unauthorized response.
    """
    tag, _, _ = read_response_header(buffer)
    off = auth_area_offset(buffer, tag)
    auths = []
    while off < len(buffer):
        auth, suboff = tpm_response_auth.unmarshal(buffer[off:])
        auths.append(auth)
        off += suboff
    return tuple(auths)


def build_response(
    tag: int,
    return_code: int,
    parameters: BytesLike = b"",
    auths: Sequence[tpm_response_auth] = (),
) -> bytes:
    """Assemble a response buffer with a correct size field.

    Args:
        tag (TPM_TAG): The response tag.
        return_code (TPM_RC): The return code.
        parameters (bytes): The output parameters.
        auths (Sequence[tpm_response_auth]): The trailing authorization blocks.

    Returns:
        The marshaled response as bytes.

    Raises:
        ValueError: If the number of blocks does not match the tag.
    """
    count = TPM_TAG.auth_count(tag)
    if count != len(auths):
        raise ValueError(
            f"{TPM_TAG.to_string(tag)} needs {count} authorization block(s), got: {len(auths)}"
        )
    body = TPM_RC(return_code).marshal() + bytes(parameters)
    body += b"".join(auth.marshal() for auth in auths)
    size = TPM_U16_SIZE + TPM_U32_SIZE + len(body)
    return TPM_TAG(tag).marshal() + UINT32(size).marshal() + body
