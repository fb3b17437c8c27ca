# SPDX-License-Identifier: BSD-2
""" This module contains the constant values from the following TCG specifications:

- https://trustedcomputinggroup.org/resource/tpm-main-specification/. See Part 2 "Structures"
  and Part 3 "Commands" of the TPM 1.2 main specification.

Along with the result codes reported by the authorization helpers themselves and
helpers to go from string values to constants and constant values to string values.
"""
from .internal.utils import _CLASS_INT_ATTRS_from_string

TPM_U16_SIZE = 2
TPM_U32_SIZE = 4
TPM_HASH_SIZE = 20
TPM_NONCE_SIZE = 20
TPM_AUTHDATA_SIZE = 20

# tag, paramSize and returnCode/ordinal
TPM_HEADER_SIZE = TPM_U16_SIZE + TPM_U32_SIZE + TPM_U32_SIZE

# nonceEven, continueAuthSession and resAuth
TPM_RESPONSE_AUTH_SIZE = TPM_NONCE_SIZE + 1 + TPM_HASH_SIZE

# authHandle, nonceOdd, continueAuthSession and authData
TPM_COMMAND_AUTH_SIZE = TPM_U32_SIZE + TPM_NONCE_SIZE + 1 + TPM_AUTHDATA_SIZE


class TPM_INT_MU:
    """Mixin class for marshaling/unmarshaling int types.

    All TPM 1.2 integers are sent most significant byte first.
    """

    _SIZE = TPM_U32_SIZE

    def marshal(self):
        """Marshal instance into bytes.

        Returns:
            Returns the marshaled type as bytes.
        """
        return int(self).to_bytes(self._SIZE, byteorder="big")

    @classmethod
    def unmarshal(cls, buf):
        """Unmarshal bytes into type instance.

        Args:
            buf (bytes): The bytes to be unmarshaled.

        Returns:
            Returns an instance of the current type and the number of bytes consumed.

        Raises:
            ValueError: If buf is shorter than the type.
        """
        if len(buf) < cls._SIZE:
            raise ValueError(
                f"{cls.__name__} needs {cls._SIZE} bytes, got: {len(buf)}"
            )
        value = int.from_bytes(bytes(buf[0 : cls._SIZE]), byteorder="big")
        return (cls(value), cls._SIZE)


class TPM_FRIENDLY_INT(int):
    _FIXUP_MAP = {}

    @classmethod
    def parse(cls, value: str) -> int:
        # If it's a string initializer value, see if it matches anything in the list
        if isinstance(value, str):
            try:
                x = _CLASS_INT_ATTRS_from_string(cls, value, cls._FIXUP_MAP)
                if not isinstance(x, int):
                    raise KeyError(f'Expected int got: "{type(x)}"')
                return x
            except KeyError:
                raise ValueError(
                    f'Could not convert friendly name to value, got: "{value}"'
                )
        else:
            raise TypeError(f'Expected value to be a str object, got: "{type(value)}"')

    @classmethod
    def iterator(cls):
        """ Returns the constants in the class.

        Returns:
            (int): The int values of the constants in the class.

        Example:
            list(TPM_TAG.iterator()) -> [193, 194, 195, 196, 197, 198]
        """
        return (
            v
            for k, v in vars(cls).items()
            if isinstance(v, int) and not k.startswith("_")
        )

    @classmethod
    def contains(cls, value: int) -> bool:
        """ Indicates if a class contains a numeric constant.

        Args:
            value (int): The raw numerical number to test for.

        Returns:
            (bool): True if the class contains the constant, False otherwise.

        Example:
            TPM_TAG.contains(0xC5) -> True
        """
        return value in cls.iterator()

    @classmethod
    def to_string(cls, value: int) -> str:
        """ Converts an integer value into it's friendly string name for that class.

        Args:
            value (int): The raw numerical number to try and convert to a name.

        Returns:
            (str): The string of the constant defining the raw numeric.

        Raises:
            ValueError: If the numeric does not match a constant.

        Example:
            TPM_TAG.to_string(0xC5) -> 'TPM_TAG.RSP_AUTH1_COMMAND'
        """
        # Take the shortest match
        m = None
        items = vars(cls).items()
        for k, v in items:
            if k.startswith("_") or not isinstance(v, int):
                continue
            if v == value and (m is None or len(k) < len(m)):
                m = k

        if m is None:
            raise ValueError(f"Could not match {value} to class {cls.__name__}")

        return f"{cls.__name__}.{m}"

    def __str__(self) -> str:
        """Returns a string value of the constant normalized to lowercase.

        Returns:
            (str): a string value of the constant normalized to lowercase.

        Example:
            str(TPM_TAG.RSP_AUTH1_COMMAND) -> 'rsp_auth1_command'
        """
        for k, v in vars(self.__class__).items():
            if k.startswith("_") or not isinstance(v, int):
                continue
            if int(self) == v:
                return k.lower()
        return str(int(self))

    @staticmethod
    def _fix_const_type(cls):
        for k, v in vars(cls).items():
            if not isinstance(v, int) or k.startswith("_"):
                continue
            fv = cls(v)
            setattr(cls, k, fv)
        return cls


@TPM_FRIENDLY_INT._fix_const_type
class TPM_TAG(TPM_FRIENDLY_INT, TPM_INT_MU):
    _SIZE = TPM_U16_SIZE

    RQU_COMMAND = 0x00C1
    RQU_AUTH1_COMMAND = 0x00C2
    RQU_AUTH2_COMMAND = 0x00C3
    RSP_COMMAND = 0x00C4
    RSP_AUTH1_COMMAND = 0x00C5
    RSP_AUTH2_COMMAND = 0x00C6

    @classmethod
    def auth_count(cls, tag: int) -> int:
        """ Returns the number of authorization blocks trailing a buffer with tag.

        Args:
            tag (int): A request or response tag.

        Returns:
            (int): 0, 1 or 2.

        Raises:
            ValueError: If the tag is not a TPM 1.2 command or response tag.
        """
        if tag in (cls.RQU_COMMAND, cls.RSP_COMMAND):
            return 0
        if tag in (cls.RQU_AUTH1_COMMAND, cls.RSP_AUTH1_COMMAND):
            return 1
        if tag in (cls.RQU_AUTH2_COMMAND, cls.RSP_AUTH2_COMMAND):
            return 2
        raise ValueError(f"unsupported tag: 0x{tag:04x}")


@TPM_FRIENDLY_INT._fix_const_type
class TPM_ORD(TPM_FRIENDLY_INT, TPM_INT_MU):
    OIAP = 0x0000000A
    OSAP = 0x0000000B
    ChangeAuth = 0x0000000C
    TakeOwnership = 0x0000000D
    Extend = 0x00000014
    PcrRead = 0x00000015
    Quote = 0x00000016
    Seal = 0x00000017
    Unseal = 0x00000018
    CreateWrapKey = 0x0000001F
    GetPubKey = 0x00000021
    Sign = 0x0000003C
    LoadKey2 = 0x00000041
    GetRandom = 0x00000046
    OwnerClear = 0x0000005B
    GetCapability = 0x00000065
    NV_DefineSpace = 0x000000CC
    NV_WriteValue = 0x000000CD
    NV_WriteValueAuth = 0x000000CE
    NV_ReadValue = 0x000000CF
    NV_ReadValueAuth = 0x000000D0


@TPM_FRIENDLY_INT._fix_const_type
class TPM_RC(TPM_FRIENDLY_INT, TPM_INT_MU):
    SUCCESS = 0x00000000
    AUTHFAIL = 0x00000001
    BADINDEX = 0x00000002
    BAD_PARAMETER = 0x00000003
    BADTAG = 0x0000001E
    AUTH2FAIL = 0x0000001D
    INVALID_AUTHHANDLE = 0x00000022
    BAD_ORDINAL = 0x0000000A


@TPM_FRIENDLY_INT._fix_const_type
class TSS_RC(TPM_FRIENDLY_INT):
    """Result codes produced on the host side, never by the TPM itself."""

    BASE = 0x00005000
    NULL_ARG = BASE + 0x0B
    HMAC_FAIL = BASE + 0x0C
    BAD_TAG = BASE + 0x0D
    BAD_SIZE = BASE + 0x0E

    _DESCRIPTIONS = {
        NULL_ARG: "a required argument is missing",
        HMAC_FAIL: "authorization HMAC mismatch",
        BAD_TAG: "unsupported authorization tag",
        BAD_SIZE: "buffer size does not match its layout",
    }

    @classmethod
    def describe(cls, value: int) -> str:
        """ Returns a human readable description of the result code.

        Args:
            value (int): The result code.

        Returns:
            (str): The description, or the hex value if the code is unknown.
        """
        return cls._DESCRIPTIONS.get(value, f"0x{value:x}")
