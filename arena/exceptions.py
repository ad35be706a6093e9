class ArenaError(Exception):
    """Base class for errors raised by the scheduling core."""

    default_message = "Arena error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class NotSolved(ArenaError):
    default_message = "Problem not solved on LeetCode"


class ProblemNotFound(ArenaError):
    default_message = "Problem not found"


class TopicNotFound(ArenaError):
    default_message = "Topic not found"


class ContestNotFound(ArenaError):
    default_message = "Contest not found"


class JudgeUnavailable(ArenaError):
    """The judge timed out or answered with a non-2xx status. Safe to retry."""

    default_message = "LeetCode is unavailable, try again later"


class Unauthorized(ArenaError):
    default_message = "Only the contest creator can do this"


class NoMoreTopics(ArenaError):
    default_message = "No more topics to activate"


class ProblemClosed(ArenaError):
    default_message = "Problem was marked as missed when its topic closed"


class NoFreezesLeft(ArenaError):
    default_message = "No freezes available"


class AlreadyInContest(ArenaError):
    default_message = "You are already in a contest"


class IncorrectPassword(ArenaError):
    default_message = "Incorrect password"
