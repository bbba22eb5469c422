"""
Enumerações fechadas do Domínio de Tickets.

Valores são os textos exibidos ao usuário e persistidos no banco.
Conversões a partir de texto livre passam por `from_string`, de modo
que nenhuma string desconhecida chegue à lógica de negócio.
"""

from enum import Enum


class _EnumTexto(Enum):
    """Base com conversão tolerante a caixa, pelo nome ou pelo valor."""

    @classmethod
    def from_string(cls, value: str):
        """
        Converte string para enum.

        Aceita o nome ("EM_ANALISE") ou o valor ("Em Análise"),
        sem diferenciar maiúsculas/minúsculas.

        Raises:
            ValueError: Se valor inválido
        """
        texto = (value or "").strip()

        try:
            return cls[texto.upper().replace(" ", "_")]
        except KeyError:
            pass

        for item in cls:
            if item.value.lower() == texto.lower():
                return item

        raise ValueError(f"{cls.__name__} inválido: {value}")


class TicketStatus(_EnumTexto):
    """
    Estados possíveis de um ticket.

    Fluxo de Estados:
        NOVO → EM_ANALISE → EM_ANDAMENTO → RESOLVIDO → FECHADO
          ↓        ↓
        CANCELADO ─┘

        RESOLVIDO/FECHADO → EM_ANALISE (reabrir)

    NOVO → EM_ANALISE acontece apenas pela primeira atribuição.
    """

    NOVO = "Novo"
    EM_ANALISE = "Em Análise"
    EM_ANDAMENTO = "Em Andamento"
    RESOLVIDO = "Resolvido"
    FECHADO = "Fechado"
    CANCELADO = "Cancelado"

    @property
    def esta_ativo(self) -> bool:
        return self not in (TicketStatus.FECHADO, TicketStatus.CANCELADO)


class TicketPriority(_EnumTexto):
    """Níveis de prioridade. O prazo de SLA de cada um está em `sla.py`."""

    BAIXA = "Baixa"
    MEDIA = "Média"
    ALTA = "Alta"
    CRITICA = "Crítica"


class CommentVisibility(_EnumTexto):
    """
    Visibilidade de comentários.

    PUBLICO: visível para qualquer usuário
    INTERNO: visível apenas para participantes do ticket
    """

    PUBLICO = "Público"
    INTERNO = "Interno"
