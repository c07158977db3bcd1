class LoanMathError(Exception):
    """Base class for errors raised while deriving loan figures."""


class InvalidInterestType(LoanMathError):
    def __init__(self, interest_type):
        self.interest_type = interest_type
        super().__init__(f"Unknown interest type: {interest_type!r}")


class ZeroTotalAmount(LoanMathError):
    def __init__(self):
        super().__init__("Total amount is zero; progress is undefined")
