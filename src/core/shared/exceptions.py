"""
Exceções de Domínio do HelpDesk.

Este módulo define exceções específicas do domínio que permitem
comunicar erros de forma clara e tipada entre as camadas.

Cada exceção declara uma `categoria`, que é tudo o que um adapter
(ex: a API HTTP) precisa para escolher o código de resposta.

Hierarquia:
    DomainException (base)
    ├── EntityNotFoundError (entidade não existe)            -> not_found
    ├── UnauthorizedError (usuário não identificado)         -> unauthorized
    ├── ForbiddenError (usuário sem permissão)               -> forbidden
    ├── ValidationError (validação de entrada)               -> invalid
    ├── BusinessRuleViolationError (regra de negócio)        -> invalid
    │   └── InvalidTransitionError (transição de status)
    ├── ConflictError (unicidade / estrutura)                -> conflict
    └── ConcurrencyError (modificação concorrente)           -> conflict
"""

from typing import ClassVar, Optional


class DomainException(Exception):
    """
    Exceção base para todos os erros de domínio.

    Todas as exceções específicas do domínio devem herdar desta classe.
    Isso permite capturar qualquer erro de domínio de forma genérica.

    Example:
        try:
            service.execute(dto)
        except DomainException as e:
            logger.error(f"Erro de domínio: {e}")
    """

    categoria: ClassVar[str] = "invalid"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict:
        """Serializa exceção para dicionário (útil para APIs)."""
        return {
            "error": self.code,
            "message": self.message,
        }


class ValidationError(DomainException):
    """
    Erro de validação de dados de entrada.

    Lançada quando dados fornecidos não atendem aos requisitos
    mínimos para processamento.

    Example:
        if len(titulo) > 180:
            raise ValidationError("Título excede o limite", field="titulo")
    """

    categoria = "invalid"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        code = f"VALIDATION_ERROR_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        return result


class EntityNotFoundError(DomainException):
    """
    Entidade não encontrada no repositório.

    Lançada quando uma busca por ID não retorna resultado.

    Example:
        ticket = repo.get_by_id(ticket_id)
        if not ticket:
            raise EntityNotFoundError(f"Ticket {ticket_id} não encontrado")
    """

    categoria = "not_found"

    def __init__(
        self,
        message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(message, "ENTITY_NOT_FOUND")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.entity_type:
            result["entity_type"] = self.entity_type
        if self.entity_id:
            result["entity_id"] = self.entity_id
        return result


class UnauthorizedError(DomainException):
    """
    O identificador do chamador não corresponde a nenhum usuário.

    Example:
        ator = usuarios.get_by_id(ator_id)
        if not ator:
            raise UnauthorizedError()
    """

    categoria = "unauthorized"

    def __init__(self, message: str = "Usuário inválido ou não informado."):
        super().__init__(message, "UNAUTHORIZED")


class ForbiddenError(DomainException):
    """
    Usuário identificado, mas sem papel/posse exigidos pela operação.

    A mensagem descreve a regra violada (ex: "somente o solicitante
    ou um Manager").
    """

    categoria = "forbidden"

    def __init__(self, message: str, rule: Optional[str] = None):
        self.rule = rule
        super().__init__(message, "FORBIDDEN")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class BusinessRuleViolationError(DomainException):
    """
    Violação de regra de negócio.

    Lançada quando uma operação viola uma regra de negócio
    estabelecida no domínio.

    Example:
        if not ticket.esta_ativo:
            raise BusinessRuleViolationError(
                "Não é possível atribuir tickets não ativos."
            )
    """

    categoria = "invalid"

    def __init__(self, message: str, rule: Optional[str] = None):
        self.rule = rule
        super().__init__(message, "BUSINESS_RULE_VIOLATION")

    def to_dict(self) -> dict:
        result = super().to_dict()
        if self.rule:
            result["rule"] = self.rule
        return result


class InvalidTransitionError(BusinessRuleViolationError):
    """
    Transição de status fora do fluxo permitido.

    Carrega a aresta tentada e o fluxo válido para orientar o operador.
    """

    def __init__(self, de: str, para: str, fluxo_valido: str):
        self.de = de
        self.para = para
        self.fluxo_valido = fluxo_valido
        super().__init__(
            f"Transição inválida: {de} -> {para}.\n"
            f"Essas são as opções válidas: {fluxo_valido}",
            rule="transicao_status",
        )

    def to_dict(self) -> dict:
        result = super().to_dict()
        result.update({"de": self.de, "para": self.para, "fluxo_valido": self.fluxo_valido})
        return result


class ConflictError(DomainException):
    """
    Violação de unicidade ou de estrutura.

    Example:
        if repo.exists_nome(nome):
            raise ConflictError("Já existe categoria com esse nome.")
    """

    categoria = "conflict"

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT")


class ConcurrencyError(DomainException):
    """
    Erro de concorrência/conflito de versão.

    Lançada quando uma operação falha devido a modificação
    concorrente da entidade.

    Example:
        if entity.versao != expected_version:
            raise ConcurrencyError("Entidade foi modificada por outro processo")
    """

    categoria = "conflict"

    def __init__(self, message: str):
        super().__init__(message, "CONCURRENCY_ERROR")
