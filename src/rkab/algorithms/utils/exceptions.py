"""
Custom exceptions for the algorithms package.
"""

class RkabError(Exception):
    """Base exception for rkab errors.
    
    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ConvergenceError(RkabError):
    """Raised when a single step keeps being rejected past the retry ceiling.
    
    Parameters
    ----------
    message : str
        The error message.
    t : float or None, optional
        Parameter value at the start of the step that failed to converge.
    h : float or None, optional
        Last trial step size that was rejected.
    retries : int or None, optional
        Number of rejected attempts made within the step.
    """

    def __init__(self, message: str, t=None, h=None, retries=None):
        super().__init__(message)
        self.t = t
        self.h = h
        self.retries = retries
