# SPDX-License-Identifier: BSD-2
"""Authorization session HMACs.

The caller and the TPM authenticate each other with HMACs keyed by the
AuthData of the object in use, over a rolling pair of nonces. The caller
supplies the odd nonce, the TPM the even one, and both are refreshed on every
round by the session layer.

Outbound, `auth_hmac` computes the value the caller attaches to an authorized
command. Inbound, `check_hmac` verifies that the HMAC(s) trailing a response
were produced by a TPM holding the same AuthData.

Both functions are pure: every hash context is local to the call, so they can
be used from any number of threads at once.
"""
import logging
from typing import Iterable, Optional, Union

from .constants import (
    TPM_TAG,
    TPM_RC,
    TPM_ORD,
    TPM_HASH_SIZE,
    TPM_NONCE_SIZE,
    TPM_HEADER_SIZE,
    TPM_U32_SIZE,
    TSS_RC,
)
from .crypto import hmac_sha1, verify_hmac_sha1
from .encoding import (
    UINT32,
    BytesLike,
    auth_area_offset,
    continue_session_byte,
    read_response_header,
    tpm_response_auth,
)
from .internal.utils import _to_bytes_or_none
from .params import TPM_PARAM, param_digest, tpm_command_param
from .TPM_Exception import (
    AuthenticationFailedError,
    NullArgumentError,
    ProtocolError,
)

logger = logging.getLogger(__name__)

# returnCode follows tag and paramSize
_RC_OFFSET = TPM_HEADER_SIZE - TPM_U32_SIZE


def _ordinal_name(ordinal: int) -> str:
    if not isinstance(ordinal, int):
        return repr(ordinal)
    if TPM_ORD.contains(ordinal):
        return TPM_ORD.to_string(ordinal)
    return f"0x{ordinal:08x}"


def _marshal_ordinal(ordinal: int) -> bytes:
    if not isinstance(ordinal, int) or ordinal < 0 or ordinal > 0xFFFFFFFF:
        raise ValueError(f"ordinal must be an unsigned 32-bit integer, got: {ordinal}")
    # TPM 1.2 hashes the ordinal in network byte order, like it is sent
    return UINT32(ordinal).marshal()


def _check_nonce(nonce: bytes, name: str) -> bytes:
    nonce = _to_bytes_or_none(nonce, name)
    if nonce is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, f"{name} is missing")
    if len(nonce) != TPM_NONCE_SIZE:
        raise ProtocolError(
            TSS_RC.BAD_SIZE,
            f"{name} must be {TPM_NONCE_SIZE} bytes, got: {len(nonce)}",
        )
    return nonce


def _check_key(key: bytes, name: str) -> bytes:
    key = _to_bytes_or_none(key, name)
    if key is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, f"{name} is missing")
    return key


def check_hmac(
    response: BytesLike,
    ordinal: int,
    nonce_odd: bytes,
    key: bytes,
    key2: Optional[bytes] = None,
    params: Iterable[TPM_PARAM] = (),
) -> TPM_RC:
    """Verify the authorization block(s) of a response.

    An unauthorized response (TPM_TAG.RSP_COMMAND) carries no HMAC and is
    accepted as is. A single authorization response is checked against key,
    a dual authorization response against key for the first block and key2 for
    the second. The same odd nonce is used for both blocks.

    The parameter digest covers the return code, the ordinal and then every
    range in params, in order.

    Args:
        response (bytes): The raw response.
        ordinal (TPM_ORD): The ordinal of the command the response answers.
        nonce_odd (bytes): The caller's nonce sent with the command.
        key (bytes): The AuthData of the first session.
        key2 (bytes): The AuthData of the second session, required for
            TPM_TAG.RSP_AUTH2_COMMAND.
        params (Iterable[TPM_PARAM]): The response ranges that are authenticated.

    Returns:
        TPM_RC.SUCCESS

    Raises:
        NullArgumentError: If response, nonce_odd, key or a required key2 is None.
        TypeError: If key or key2 is not bytes-like.
        ProtocolError: If the tag is not an authorization tag or the buffer is malformed.
        AuthenticationFailedError: If any HMAC does not match.
    """
    if response is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, "response is missing")

    tag, _, _ = read_response_header(response)
    if tag == TPM_TAG.RSP_COMMAND:
        logger.debug("%s: unauthorized response", _ordinal_name(ordinal))
        return TPM_RC.SUCCESS

    if nonce_odd is None or key is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, "nonce_odd and key are required")

    if tag not in (TPM_TAG.RSP_AUTH1_COMMAND, TPM_TAG.RSP_AUTH2_COMMAND):
        raise ProtocolError(TSS_RC.BAD_TAG, f"cannot check tag 0x{tag:04x}")

    if tag == TPM_TAG.RSP_AUTH2_COMMAND and key2 is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, "key2 is required for two sessions")

    key = _check_key(key, "key")
    if key2 is not None:
        key2 = _check_key(key2, "key2")

    nonce_odd = _check_nonce(nonce_odd, "nonce_odd")
    offset = auth_area_offset(response, tag)

    digest = param_digest(
        params,
        response,
        prefix=(
            bytes(response[_RC_OFFSET:TPM_HEADER_SIZE]),
            _marshal_ordinal(ordinal),
        ),
    )

    keys = [key] if tag == TPM_TAG.RSP_AUTH1_COMMAND else [key, key2]
    for session, k in enumerate(keys, start=1):
        auth, suboff = tpm_response_auth.unmarshal(response[offset:])
        logger.debug("%s: checking session %d", _ordinal_name(ordinal), session)
        if not verify_hmac_sha1(
            k,
            auth.hmac,
            digest,
            auth.nonce,
            nonce_odd,
            continue_session_byte(auth.continue_session),
        ):
            logger.warning(
                "%s: HMAC of authorization session %d does not match",
                _ordinal_name(ordinal),
                session,
            )
            raise AuthenticationFailedError(session)
        offset += suboff

    return TPM_RC.SUCCESS


def auth_hmac(
    key: bytes,
    nonce_even: bytes,
    nonce_odd: bytes,
    continue_session: Union[bool, int],
    params: Iterable[TPM_PARAM] = (),
    digest: Optional[Union[bytearray, memoryview]] = None,
) -> bytes:
    """Compute the HMAC for an authorized command.

    Args:
        key (bytes): The AuthData of the session.
        nonce_even (bytes): The last even nonce received from the TPM.
        nonce_odd (bytes): The caller's nonce for this command.
        continue_session (bool): The continueAuthSession flag sent with the command.
        params (Iterable[TPM_PARAM]): The command bytes that are authenticated, in order.
        digest (bytearray): Optional writable buffer that receives the HMAC.

    Returns:
        The 20 byte HMAC.

    Raises:
        NullArgumentError: If a nonce, the key or a parameter source is None.
        TypeError: If key is not bytes-like.
        ProtocolError: If a nonce has the wrong size or digest is too small.
    """
    if nonce_even is None or nonce_odd is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, "both nonces are required")
    if key is None:
        raise NullArgumentError(TSS_RC.NULL_ARG, "key is missing")
    key = _check_key(key, "key")
    nonce_even = _check_nonce(nonce_even, "nonce_even")
    nonce_odd = _check_nonce(nonce_odd, "nonce_odd")
    flag = continue_session_byte(continue_session)

    pdigest = param_digest(params)
    result = hmac_sha1(key, pdigest, nonce_even, nonce_odd, flag)

    if digest is not None:
        if len(digest) < TPM_HASH_SIZE:
            raise ProtocolError(
                TSS_RC.BAD_SIZE,
                f"digest buffer must hold {TPM_HASH_SIZE} bytes, got: {len(digest)}",
            )
        digest[0:TPM_HASH_SIZE] = result
    return result


def response_auth(
    key: bytes,
    ordinal: int,
    nonce_even: bytes,
    nonce_odd: bytes,
    continue_session: Union[bool, int],
    return_code: int = TPM_RC.SUCCESS,
    params: Iterable[TPM_PARAM] = (),
) -> tpm_response_auth:
    """Compute the authorization block a TPM attaches to a response.

    This is the TPM side of `check_hmac`, useful for simulators and tests.

    Args:
        key (bytes): The AuthData of the session.
        ordinal (TPM_ORD): The ordinal of the command being answered.
        nonce_even (bytes): The fresh even nonce of the TPM.
        nonce_odd (bytes): The odd nonce received with the command.
        continue_session (bool): The continueAuthSession flag returned.
        return_code (TPM_RC): The return code of the response.
        params (Iterable[TPM_PARAM]): The output parameters that are authenticated.

    Returns:
        A `tpm_response_auth` ready to be marshaled.
    """
    prefix = [
        tpm_command_param(TPM_RC(return_code).marshal()),
        tpm_command_param(_marshal_ordinal(ordinal)),
    ]
    hmac = auth_hmac(
        key, nonce_even, nonce_odd, continue_session, prefix + list(params)
    )
    return tpm_response_auth(
        nonce=bytes(nonce_even),
        continue_session=int(continue_session),
        hmac=hmac,
    )
