"""Exceptions raised by the onboarding demo."""


class OnboardingError(Exception):
    """Base class for errors the CLI reports before exiting."""


class UnknownActionError(OnboardingError):
    def __init__(self, action: str):
        super().__init__(f'unknown action "{action}": try client/server')
        self.action = action
