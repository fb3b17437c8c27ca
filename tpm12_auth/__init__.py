# SPDX-License-Identifier: BSD-2
from .constants import *
from .TPM_Exception import (
    TPM_Exception,
    NullArgumentError,
    ProtocolError,
    AuthenticationFailedError,
)
from .encoding import (
    tpm_response_auth,
    tpm_command_auth,
    read_response_header,
    read_response_auths,
    build_response,
)
from .params import tpm_response_param, tpm_command_param, param_digest
from .auth import check_hmac, auth_hmac, response_auth
from .crypto import generate_nonce
