ERRORS = {
  "E_UNKNOWN_TYPE": "Account type not declared in the IDL",
  "E_DISCRIMINATOR_MISMATCH": "Account discriminator does not match the requested type",
  "E_MALFORMED_INPUT": "Account data is shorter than its layout requires",
  "E_LAYOUT_RESOLUTION": "IDL references a type that cannot be resolved",
  "E_ENCODE": "Value does not fit the account layout",
}


class AccountCoderError(ValueError):
    code = "E_ACCOUNT_CODER"

    def __init__(self, detail: str = ""):
        self.detail = detail
        message = ERRORS.get(self.code, "Account coder failure")
        super().__init__(f"{message}: {detail}" if detail else message)


class UnknownType(AccountCoderError):
    code = "E_UNKNOWN_TYPE"

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(repr(type_name))


class DiscriminatorMismatch(AccountCoderError):
    code = "E_DISCRIMINATOR_MISMATCH"

    def __init__(self, type_name: str, expected: bytes, actual: bytes):
        self.type_name = type_name
        self.expected = expected
        self.actual = actual
        super().__init__(f"{type_name!r} expected {expected.hex()} got {actual.hex()}")


class MalformedInput(AccountCoderError):
    code = "E_MALFORMED_INPUT"


class LayoutResolutionFailure(AccountCoderError):
    code = "E_LAYOUT_RESOLUTION"


class EncodeError(AccountCoderError):
    code = "E_ENCODE"
