"""
Erreurs métier levées par les services.

Chaque erreur porte son code HTTP : les handlers de app.main les traduisent
en réponse JSON {status_code, message, error} sans que les routers aient
à intercepter quoi que ce soit.
"""


class AppError(Exception):
    """Base des erreurs métier."""
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AppError):
    """Entrée invalide ou hors règle métier (date, énumération, mot de passe...)."""
    status_code = 400
    error = "Bad Request"


class UnauthorizedError(AppError):
    """Identifiants ou token absents, invalides ou expirés."""
    status_code = 401
    error = "Unauthorized"


class ForbiddenError(AppError):
    """Utilisateur authentifié mais rôle non autorisé."""
    status_code = 403
    error = "Forbidden"


class NotFoundError(AppError):
    """Ressource absente ou appartenant à une autre école."""
    status_code = 404
    error = "Not Found"


class ConflictError(AppError):
    """Violation d'une contrainte d'unicité ou d'un prérequis métier."""
    status_code = 409
    error = "Conflict"
