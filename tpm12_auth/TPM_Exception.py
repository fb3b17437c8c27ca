# SPDX-License-Identifier: BSD-2
from typing import Union

from .constants import TPM_RC, TSS_RC


class TPM_Exception(RuntimeError):
    """TPM_Exception represents an error reported by the authorization helpers."""

    _DEFAULT_RC = TSS_RC.HMAC_FAIL

    def __init__(self, rc: Union[TSS_RC, TPM_RC, int, None] = None, msg: str = None):
        if rc is None:
            rc = self._DEFAULT_RC
        if TSS_RC.contains(rc):
            rc = TSS_RC(rc)
            errmsg = TSS_RC.describe(rc)
        elif TPM_RC.contains(rc):
            rc = TPM_RC(rc)
            errmsg = TPM_RC.to_string(rc)
        else:
            errmsg = f"0x{rc:x}"
        if msg:
            errmsg = f"{errmsg}: {msg}"
        super(TPM_Exception, self).__init__(errmsg)

        self._rc = rc

    @property
    def rc(self):
        """int: The result code of the failed call."""
        return self._rc


class NullArgumentError(TPM_Exception):
    """A required buffer, nonce or key was not supplied."""

    _DEFAULT_RC = TSS_RC.NULL_ARG


class ProtocolError(TPM_Exception):
    """The buffer does not follow the layout its tag announces."""

    _DEFAULT_RC = TSS_RC.BAD_TAG


class AuthenticationFailedError(TPM_Exception):
    """The recomputed HMAC differs from the one embedded in the response.

    This is the only signal that a response was not produced by a TPM holding
    the expected AuthData, it must never be downgraded or ignored.
    """

    _DEFAULT_RC = TSS_RC.HMAC_FAIL

    def __init__(self, session: int = 1, msg: str = None):
        if msg is None:
            msg = f"authorization session {session}"
        super(AuthenticationFailedError, self).__init__(self._DEFAULT_RC, msg)
        self._session = session

    @property
    def session(self):
        """int: The 1-based index of the authorization block that failed."""
        return self._session
