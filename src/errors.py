"""Exceptions raised by the feed generator"""


class FeedError(Exception):
    """Base class for all feed generator errors"""


class ConfigError(FeedError):
    """Configuration file is missing or malformed (fatal)"""


class OutputDirectoryError(FeedError):
    """Output directory cannot be created (fatal)"""


class PRFetchError(FeedError):
    """Pull requests for one repository could not be fetched"""


class FeedRenderError(FeedError):
    """A feed document could not be rendered or written"""


class IndexRenderError(FeedError):
    """The HTML index could not be rendered or written (fatal)"""
