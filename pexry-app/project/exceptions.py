"""
Exceptions métier partagées par les services Pexry
Chaque exception porte le code HTTP que les vues renvoient
"""


class ServiceError(Exception):
    """Erreur métier générique (500)"""
    status_code = 500
    default_message = 'An unexpected error occurred'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Conflict(ServiceError):
    """La ressource existe déjà ou l'état courant interdit l'opération"""
    status_code = 409
    default_message = 'Conflict'


