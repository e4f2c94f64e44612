class QuizError(Exception):
    """Base class for errors raised by the quiz core."""

    code: str = "quiz_error"


class EmptyVocabulary(QuizError):
    code = "empty_vocabulary"

    def __init__(self, message: str = "Er zijn geen woorden om te oefenen."):
        super().__init__(message)


class InvalidSubmission(QuizError):
    """A blank answer. Nothing in the session changed."""

    code = "invalid_submission"

    def __init__(self, message: str = "Vul een antwoord in."):
        super().__init__(message)


class OutOfSequenceSubmission(QuizError):
    """A call that does not fit the current session state."""

    code = "out_of_sequence"


class VocabularyError(Exception):
    code: str = "vocabulary_error"


class InvalidVocabularyEntry(VocabularyError):
    code = "invalid_entry"


class UnknownHeadword(VocabularyError):
    code = "unknown_headword"

    def __init__(self, headword: str):
        super().__init__(f"Onbekend woord: {headword}")
        self.headword = headword


class ImportFormatError(VocabularyError):
    code = "import_format"
