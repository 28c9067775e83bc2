"""
Error taxonomy shared by the intake pipeline, the lifecycle manager and the API

Every error carries a short title and a human-readable message that the
frontend can show as-is in a notification.
"""
from typing import Iterable, Optional


class TechMateError(Exception):
    """Base class for all domain errors"""

    title = "Erro"
    default_message = "Ocorreu um erro inesperado."

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class DeviceAccessError(TechMateError):
    """Audio input device could not be acquired (denied, busy or missing)"""

    title = "Erro no microfone"
    default_message = "Não foi possível aceder ao microfone. Verifique as permissões."


class TranscriptionError(TechMateError):
    """Speech-to-text upstream failed"""

    title = "Erro na transcrição"
    default_message = "Ocorreu um erro ao transcrever o áudio. Tente novamente ou escreva a descrição."


class GenerationError(TechMateError):
    """Solution generation upstream failed"""

    title = "Erro no processamento"
    default_message = "Ocorreu um erro ao gerar a solução. Tente novamente."
    status_code = 500


class RateLimitExceededError(GenerationError):
    title = "Limite de pedidos"
    default_message = "Rate limit exceeded. Please try again later."
    status_code = 429


class PaymentRequiredError(GenerationError):
    title = "Créditos esgotados"
    default_message = "Payment required. Please add credits to your workspace."
    status_code = 402


class MissingCredentialsError(GenerationError):
    title = "Configuração em falta"
    default_message = "AI gateway credentials are not configured."


class ValidationError(TechMateError):
    """Required fields missing before commit"""

    title = "Campos obrigatórios"
    default_message = "Por favor, preencha todos os campos obrigatórios."

    def __init__(self, missing_fields: Iterable[str], message: Optional[str] = None):
        self.missing_fields = list(missing_fields)
        super().__init__(message, detail=", ".join(self.missing_fields))


class PersistenceError(TechMateError):
    """Store read or write failed"""

    title = "Erro ao guardar"
    default_message = "Não foi possível guardar a intervenção."


class InvalidTransitionError(TechMateError):
    title = "Transição inválida"
    default_message = "A intervenção não pode mudar para esse estado."


class NotFoundError(TechMateError):
    title = "Não encontrado"
    default_message = "O registo pedido não existe."


class PipelineBusyError(TechMateError):
    """Action not allowed in the current intake step"""

    title = "Processamento em curso"
    default_message = "Aguarde que o processamento atual termine."
