"""Exceptions and warnings raised while reading ANSYS CDB files"""


class ParseError(Exception):
    """Base exception for parsing errors"""
    pass


class StreamUnreadableError(ParseError):
    """Exception for missing, unreadable or undecodable input"""
    pass


class MalformedNumericLineError(ParseError):
    """Exception for numeric records that cannot be parsed"""
    pass


class MalformedDeclarationError(ParseError):
    """Exception for keyword lines with missing or invalid fields"""
    pass


class UnknownTopologyError(ParseError):
    """Exception for element type codes with no registered definition"""
    pass


class AmbiguousNodeCountError(ParseError):
    """Exception for a known element type code used with an unsupported node count"""
    pass


class UnresolvedNodeReferenceError(ParseError):
    """Exception for elements or groups that reference undeclared nodes"""
    pass


class DuplicateForeignNodeIdError(ParseError):
    """Exception for a node id declared twice in the coordinate block"""
    pass


class UnexpectedEndOfStreamError(ParseError):
    """Exception for a block that is cut off by the end of the file"""
    pass


class ParseWarning(UserWarning):
    """Warning for non-critical parsing issues"""
    pass


def format_message(message: str, line_num=None) -> str:
    """Prefix a message with its line number when one is known"""
    return f"Line {line_num}: {message}" if line_num else message
