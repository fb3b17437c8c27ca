# SPDX-License-Identifier: BSD-2
"""Parameter digest construction.

Both directions of the authorization protocol hash a selection of the
command or response bytes before the HMAC is computed. The selection is an
ordered sequence of descriptors:

- `tpm_response_param` names a range of a response buffer by offset and length.
- `tpm_command_param` carries the outbound bytes themselves.

Descriptors are hashed in the order given. A descriptor with a length of zero
contributes nothing, the sequence ends where the iterable ends.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from .constants import TSS_RC
from .crypto import sha1
from .encoding import BytesLike, check_range
from .internal.utils import _to_bytes_or_none
from .TPM_Exception import NullArgumentError, ProtocolError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class tpm_response_param:
    """A range of a response buffer taking part in the parameter digest."""

    offset: int
    length: int


@dataclass(frozen=True)
class tpm_command_param:
    """Outbound bytes taking part in the parameter digest.

    Args:
        data (bytes): The bytes to hash, None if absent.
        length (int): How many leading bytes of data to hash, defaults to all of them.
    """

    data: Optional[bytes]
    length: Optional[int] = None


TPM_PARAM = Union[
    tpm_response_param, tpm_command_param, Tuple[int, Union[int, BytesLike, None]]
]


def _to_param(param: TPM_PARAM) -> Union[tpm_response_param, tpm_command_param]:
    if isinstance(param, (tpm_response_param, tpm_command_param)):
        return param
    if isinstance(param, tuple) and len(param) == 2:
        length, source = param
        if isinstance(source, int):
            return tpm_response_param(offset=source, length=length)
        return tpm_command_param(data=source, length=length)
    raise TypeError(
        f"Expected a parameter descriptor or a (length, source) tuple, got: {type(param).__name__}"
    )


def _check_int(value, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(
            f"Expected {name} to be an int, got: {type(value).__name__}"
        )


def _command_chunk(param: tpm_command_param) -> bytes:
    data = _to_bytes_or_none(param.data, "data")
    length = param.length
    if length is not None:
        _check_int(length, "length")
    if length == 0:
        return b""
    if data is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, "parameter data is missing")
    if length is None:
        return data
    if length < 0 or length > len(data):
        raise ProtocolError(
            TSS_RC.BAD_SIZE,
            f"parameter length {length} exceeds the {len(data)} bytes supplied",
        )
    return data[0:length]


def _response_chunk(param: tpm_response_param, buffer: Optional[BytesLike]) -> bytes:
    _check_int(param.offset, "offset")
    _check_int(param.length, "length")
    if param.length == 0:
        return b""
    if buffer is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, "response buffer is missing")
    check_range(buffer, param.offset, param.length)
    return bytes(buffer[param.offset : param.offset + param.length])


def param_chunks(
    params: Iterable[TPM_PARAM], buffer: Optional[BytesLike] = None
) -> List[bytes]:
    """Resolve every descriptor into the bytes it selects.

    All descriptors are validated before anything is returned so that a bad
    entry aborts the digest instead of producing one.

    Args:
        params (Iterable[TPM_PARAM]): The ordered descriptors.
        buffer (bytes): The response that `tpm_response_param` entries index into.

    Returns:
        A list of bytes, one entry per non-empty descriptor.

    Raises:
        NullArgumentError: If a descriptor with a nonzero length has no source.
        ProtocolError: If a range does not fit inside its source.
    """
    chunks = []
    for param in params:
        param = _to_param(param)
        if isinstance(param, tpm_response_param):
            chunk = _response_chunk(param, buffer)
        else:
            chunk = _command_chunk(param)
        if chunk:
            chunks.append(chunk)
    return chunks


def param_bytes(
    params: Iterable[TPM_PARAM], buffer: Optional[BytesLike] = None
) -> bytes:
    """Returns the concatenation of the selected bytes, in order."""
    return b"".join(param_chunks(params, buffer))


def param_digest(
    params: Iterable[TPM_PARAM],
    buffer: Optional[BytesLike] = None,
    prefix: Iterable[bytes] = (),
) -> bytes:
    """Compute the parameter digest.

    Args:
        params (Iterable[TPM_PARAM]): The ordered descriptors.
        buffer (bytes): The response that `tpm_response_param` entries index into.
        prefix (Iterable[bytes]): Chunks hashed before the descriptors, for
            instance the return code and ordinal of a response.

    Returns:
        The 20 byte SHA-1 digest.
    """
    chunks = list(prefix) + param_chunks(params, buffer)
    logger.debug("parameter digest over %d chunk(s)", len(chunks))
    return sha1(*chunks)
