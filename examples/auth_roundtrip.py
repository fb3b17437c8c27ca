import sys
import logging

from tpm12_auth import (
    TPM_TAG,
    TPM_ORD,
    TPM_RC,
    AuthenticationFailedError,
    build_response,
    check_hmac,
    auth_hmac,
    response_auth,
    generate_nonce,
    tpm_command_auth,
    tpm_command_param,
    tpm_response_param,
    TPM_U16_SIZE,
    TPM_U32_SIZE,
    TPM_COMMAND_AUTH_SIZE,
)
from tpm12_auth.encoding import UINT32

# highlight using ANSI color codes
yellow = "\x1b[93m"
blue = "\x1b[34m"
cyan = "\x1b[96m"
light_grey = "\x1b[37m"
reset = "\x1b[0m"

# setup logging
root_logger = logging.getLogger()
root_logger.setLevel(logging.NOTSET)
handler = logging.StreamHandler()
formatter = logging.Formatter(
    f"{light_grey}[%(levelname)s]{reset} {blue}%(pathname)s:%(lineno)d{reset} - {cyan}%(name)s {yellow}%(message)s{reset}",
    "%Y-%m-%d %H:%M:%S",
)
handler.setFormatter(formatter)
root_logger.addHandler(handler)
logging.getLogger("tpm12_auth").setLevel(logging.DEBUG)


def main():
    # Usage information
    if len(sys.argv) != 2:
        print(f"Authenticate an Unseal round trip with a shared secret", file=sys.stderr)
        print(f"", file=sys.stderr)
        print(f"Usage: {sys.argv[0]} secret", file=sys.stderr)
        sys.exit(1)
    # AuthData is at most 20 bytes
    secret = sys.argv[1].encode()
    if len(secret) > 20:
        raise ValueError("secret must be at most 20 bytes")
    # Nonce from the previous response, and a fresh one from the caller
    nonce_even = generate_nonce()
    nonce_odd = generate_nonce()
    # Caller side: authorize the command parameters
    ordinal = TPM_ORD.Unseal
    inparams = [
        tpm_command_param(ordinal.marshal()),
        tpm_command_param(b"\x00\x00\x00\x04sealed blob"),
    ]
    command_auth = auth_hmac(secret, nonce_even, nonce_odd, True, inparams)
    # Marshal the command with its authorization block
    body = b"".join(p.data for p in inparams)
    session = tpm_command_auth(0x02000000, nonce_odd, 1, command_auth).marshal()
    command = (
        TPM_TAG.RQU_AUTH1_COMMAND.marshal()
        + UINT32(TPM_U16_SIZE + TPM_U32_SIZE + len(body) + len(session)).marshal()
        + body
        + session
    )
    # TPM side: authenticate the command from its marshaled bytes
    received, _ = tpm_command_auth.unmarshal(command[-TPM_COMMAND_AUTH_SIZE:])
    expected = auth_hmac(
        secret,
        nonce_even,
        received.nonce,
        received.continue_session,
        [tpm_command_param(command[TPM_U16_SIZE + TPM_U32_SIZE : -TPM_COMMAND_AUTH_SIZE])],
    )
    if expected != received.hmac:
        raise AssertionError("command authorization mismatch")
    outdata = b"\x00\x00\x00\x06secret"
    nonce_even = generate_nonce()
    auth = response_auth(
        secret,
        ordinal,
        nonce_even,
        nonce_odd,
        False,
        params=[tpm_command_param(outdata)],
    )
    response = build_response(
        TPM_TAG.RSP_AUTH1_COMMAND, TPM_RC.SUCCESS, outdata, [auth]
    )
    # Caller side: verify the response came from someone holding the secret
    check_hmac(
        response,
        ordinal,
        nonce_odd,
        secret,
        params=[tpm_response_param(10, len(outdata))],
    )
    # An interposer changing the output is caught
    tampered = bytearray(response)
    tampered[14] ^= 0xFF
    try:
        check_hmac(
            bytes(tampered),
            ordinal,
            nonce_odd,
            secret,
            params=[tpm_response_param(10, len(outdata))],
        )
    except AuthenticationFailedError:
        pass
    else:
        raise AssertionError("tampered response was accepted")
    # Print the unsealed data to stdout
    sys.stdout.buffer.write(outdata[4:])


if __name__ == "__main__":
    main()
