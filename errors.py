# filename: errors.py
# Erros do CMS. A mensagem de cada exceção é exibida ao usuário via flash.


class CMSError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidName(CMSError):
    pass


class AlreadyExists(CMSError):
    pass


class NotFound(CMSError):
    pass


class AuthenticationFailed(CMSError):
    pass


class AuthorizationRequired(CMSError):
    pass
