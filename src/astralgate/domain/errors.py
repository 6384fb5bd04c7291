class PremiumInvariantError(RuntimeError):
    """Raised when premium state or a reward batch breaks a core invariant.

    Expected negative outcomes (unknown gate, insufficient funds, roll caps) are
    never reported through this error; they come back as result statuses.
    """
