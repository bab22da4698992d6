"""
Content Filter Module

Rejects request bodies that contain a configured word or phrase.
"""

from dataclasses import dataclass

from proxy_service.common.errors import ContentRejectedError


@dataclass(frozen=True)
class ContentFilter:
    """
    Request Body Content Filter

    Matching modes:
    - contains: the phrase anywhere in the body, as a plain substring
    - exact: the phrase as a whole token, delimited by a space or a double
      quote on each side (` phrase `, `"phrase"`, ` phrase"`, `"phrase `)

    A phrase with no delimiter at all (e.g. a body that is exactly the phrase)
    is not an exact match.
    """

    # Forbidden word or phrase, empty disables the filter
    phrase: str = ""
    exact: bool = True
    insensitive: bool = False

    @property
    def enabled(self) -> bool:
        return self.phrase != ""

    def patterns(self, phrase: str) -> list[str]:
        if not self.exact:
            return [phrase]
        return [
            f" {phrase} ",
            f'"{phrase}"',
            f' {phrase}"',
            f'"{phrase} ',
        ]

    def validate(self, body: str) -> None:
        """
        Validate a request body

        Args:
            body: Request body text

        Raises:
            ContentRejectedError: If the body contains the forbidden phrase
        """
        if not self.enabled:
            return

        phrase = self.phrase
        if self.insensitive:
            body = body.lower()
            phrase = phrase.lower()

        for pattern in self.patterns(phrase):
            if pattern in body:
                raise ContentRejectedError(phrase)
