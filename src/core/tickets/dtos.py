"""
Data Transfer Objects (DTOs) do Domínio de Tickets.

DTOs são estruturas simples para transportar dados entre camadas,
evitando vazamento de modelos internos (entidades) para camadas externas.

Tipos de DTOs:
- Input DTOs: Recebem dados de entrada (de APIs), sempre com `ator_id`
- Output DTOs: Formatam dados para resposta
- Query DTOs: Filtros e paginação de listagens

Valores de enum trafegam como texto ("Alta", "Em Análise"); a
conversão e a validação acontecem nos use cases.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .entities import (
    AnexoEntity,
    TicketAcaoEntity,
    TicketComentarioEntity,
    TicketEntity,
)

SOLICITANTE_REMOVIDO = "(solicitante removido)"
SEM_RESPONSAVEL = "(sem responsável)"
CATEGORIA_REMOVIDA = "(categoria removida)"
AUTOR_REMOVIDO = "(autor removido)"


def _iso(valor: Optional[datetime]) -> Optional[str]:
    return valor.isoformat() if valor else None


# =============================================================================
# INPUT DTOs (Entrada)
# =============================================================================

@dataclass(frozen=True)
class CriarTicketInputDTO:
    """
    DTO de entrada para criar ticket.

    Imutável (frozen=True) para garantir que dados
    recebidos não sejam alterados acidentalmente.

    Attributes:
        ator_id: ID do usuário que está criando (vira o solicitante)
        titulo: Título do ticket
        descricao: Descrição detalhada
        prioridade: Prioridade ("Baixa", "Média", "Alta", "Crítica")
        categoria_id: Categoria do ticket
    """

    ator_id: str
    titulo: str
    descricao: str
    prioridade: str
    categoria_id: Optional[str] = None


@dataclass(frozen=True)
class AtualizarTicketInputDTO:
    """
    Atualização parcial de ticket.

    Campos None ou em branco significam "não informado".
    """

    ator_id: str
    ticket_id: str
    titulo: Optional[str] = None
    descricao: Optional[str] = None
    prioridade: Optional[str] = None
    categoria_id: Optional[str] = None


@dataclass(frozen=True)
class AtribuirTicketInputDTO:
    ator_id: str
    ticket_id: str
    agente_id: str


@dataclass(frozen=True)
class AlterarSolicitanteInputDTO:
    ator_id: str
    ticket_id: str
    solicitante_id: str


@dataclass(frozen=True)
class AlterarStatusInputDTO:
    ator_id: str
    ticket_id: str
    status: str


@dataclass(frozen=True)
class MotivoInputDTO:
    """Entrada de reabertura e cancelamento: o motivo é obrigatório."""

    ator_id: str
    ticket_id: str
    motivo: Optional[str] = None


@dataclass(frozen=True)
class CriarComentarioInputDTO:
    ator_id: str
    ticket_id: str
    mensagem: str
    visibilidade: str = "Público"


@dataclass(frozen=True)
class EditarComentarioInputDTO:
    ator_id: str
    ticket_id: str
    comentario_id: str
    mensagem: str


@dataclass(frozen=True)
class RegistrarAnexoInputDTO:
    """
    Upload de anexo.

    Attributes:
        conteudo: Bytes do arquivo
        content_type: Tipo MIME informado pelo cliente (pode ser vazio)
    """

    ator_id: str
    ticket_id: str
    nome_arquivo: str
    conteudo: bytes
    content_type: Optional[str] = None


# =============================================================================
# OUTPUT DTOs (Saída)
# =============================================================================

@dataclass
class TicketOutputDTO:
    """
    DTO de saída completo com dados do ticket.

    Nomes de solicitante, responsável e categoria vêm resolvidos;
    referências removidas aparecem com os textos padrão
    ("(solicitante removido)", "(sem responsável)", "(categoria removida)").
    """

    id: str
    titulo: str
    descricao: str
    status: str
    prioridade: str
    solicitante_id: Optional[str]
    solicitante_nome: str
    responsavel_id: Optional[str]
    responsavel_nome: str
    categoria_id: Optional[str]
    categoria_nome: str
    criado_em: datetime
    sla_inicio_em: Optional[datetime]
    sla_prazo: Optional[datetime]
    atribuido_em: Optional[datetime]
    fechado_em: Optional[datetime]
    esta_atrasado: bool

    @classmethod
    def from_entity(
        cls,
        entity: TicketEntity,
        agora: datetime,
        solicitante_nome: Optional[str] = None,
        responsavel_nome: Optional[str] = None,
        categoria_nome: Optional[str] = None,
    ) -> "TicketOutputDTO":
        """
        Factory method para converter entidade em DTO.

        Args:
            entity: Entidade TicketEntity
            agora: Referência para `esta_atrasado`
            solicitante_nome, responsavel_nome, categoria_nome: nomes
                já resolvidos (None = referência ausente)
        """
        return cls(
            id=entity.id,
            titulo=entity.titulo,
            descricao=entity.descricao,
            status=entity.status.value,
            prioridade=entity.prioridade.value,
            solicitante_id=entity.solicitante_id,
            solicitante_nome=solicitante_nome or SOLICITANTE_REMOVIDO,
            responsavel_id=entity.responsavel_id,
            responsavel_nome=responsavel_nome or SEM_RESPONSAVEL,
            categoria_id=entity.categoria_id,
            categoria_nome=categoria_nome or CATEGORIA_REMOVIDA,
            criado_em=entity.criado_em,
            sla_inicio_em=entity.sla_inicio_em,
            sla_prazo=entity.sla_prazo,
            atribuido_em=entity.atribuido_em,
            fechado_em=entity.fechado_em,
            esta_atrasado=entity.esta_atrasado_em(agora),
        )

    def to_dict(self) -> dict:
        """Converte para dicionário (serialização JSON)."""
        return {
            "id": self.id,
            "titulo": self.titulo,
            "descricao": self.descricao,
            "status": self.status,
            "prioridade": self.prioridade,
            "solicitante": {"id": self.solicitante_id, "nome": self.solicitante_nome},
            "responsavel": {"id": self.responsavel_id, "nome": self.responsavel_nome},
            "categoria": {"id": self.categoria_id, "nome": self.categoria_nome},
            "criado_em": _iso(self.criado_em),
            "sla_inicio_em": _iso(self.sla_inicio_em),
            "sla_prazo": _iso(self.sla_prazo),
            "atribuido_em": _iso(self.atribuido_em),
            "fechado_em": _iso(self.fechado_em),
            "esta_atrasado": self.esta_atrasado,
        }


@dataclass
class TicketListItemDTO:
    """
    DTO otimizado para listagens de tickets.

    Contém apenas campos necessários para exibição em lista.
    """

    id: str
    titulo: str
    status: str
    prioridade: str
    criado_em: datetime
    sla_prazo: Optional[datetime]
    solicitante_id: Optional[str]
    solicitante_nome: str
    responsavel_id: Optional[str]
    responsavel_nome: str
    categoria_id: Optional[str]
    categoria_nome: str

    @classmethod
    def from_entity(
        cls,
        entity: TicketEntity,
        solicitante_nome: Optional[str] = None,
        responsavel_nome: Optional[str] = None,
        categoria_nome: Optional[str] = None,
    ) -> "TicketListItemDTO":
        return cls(
            id=entity.id,
            titulo=entity.titulo,
            status=entity.status.value,
            prioridade=entity.prioridade.value,
            criado_em=entity.criado_em,
            sla_prazo=entity.sla_prazo,
            solicitante_id=entity.solicitante_id,
            solicitante_nome=solicitante_nome or SOLICITANTE_REMOVIDO,
            responsavel_id=entity.responsavel_id,
            responsavel_nome=responsavel_nome or SEM_RESPONSAVEL,
            categoria_id=entity.categoria_id,
            categoria_nome=categoria_nome or CATEGORIA_REMOVIDA,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "titulo": self.titulo,
            "status": self.status,
            "prioridade": self.prioridade,
            "criado_em": _iso(self.criado_em),
            "sla_prazo": _iso(self.sla_prazo),
            "solicitante": {"id": self.solicitante_id, "nome": self.solicitante_nome},
            "responsavel": {"id": self.responsavel_id, "nome": self.responsavel_nome},
            "categoria": {"id": self.categoria_id, "nome": self.categoria_nome},
        }


@dataclass
class ComentarioOutputDTO:
    id: str
    ticket_id: str
    autor_id: Optional[str]
    autor_nome: str
    visibilidade: str
    mensagem: str
    criado_em: datetime

    @classmethod
    def from_entity(
        cls,
        entity: TicketComentarioEntity,
        autor_nome: Optional[str] = None,
    ) -> "ComentarioOutputDTO":
        return cls(
            id=entity.id,
            ticket_id=entity.ticket_id,
            autor_id=entity.autor_id,
            autor_nome=autor_nome or AUTOR_REMOVIDO,
            visibilidade=entity.visibilidade.value,
            mensagem=entity.mensagem,
            criado_em=entity.criado_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "autor": {"id": self.autor_id, "nome": self.autor_nome},
            "visibilidade": self.visibilidade,
            "mensagem": self.mensagem,
            "criado_em": _iso(self.criado_em),
        }


@dataclass
class AnexoOutputDTO:
    id: str
    ticket_id: str
    nome_arquivo: str
    content_type: str
    tamanho_bytes: int
    url_publica: str
    autor_id: Optional[str]
    enviado_em: datetime

    @classmethod
    def from_entity(cls, entity: AnexoEntity) -> "AnexoOutputDTO":
        return cls(
            id=entity.id,
            ticket_id=entity.ticket_id,
            nome_arquivo=entity.nome_arquivo,
            content_type=entity.content_type,
            tamanho_bytes=entity.tamanho_bytes,
            url_publica=entity.url_publica,
            autor_id=entity.autor_id,
            enviado_em=entity.enviado_em,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ticket_id": self.ticket_id,
            "nome_arquivo": self.nome_arquivo,
            "content_type": self.content_type,
            "tamanho_bytes": self.tamanho_bytes,
            "url_publica": self.url_publica,
            "autor_id": self.autor_id,
            "enviado_em": _iso(self.enviado_em),
        }


@dataclass
class AcaoOutputDTO:
    descricao: str
    criado_em: datetime

    @classmethod
    def from_entity(cls, entity: TicketAcaoEntity) -> "AcaoOutputDTO":
        return cls(descricao=entity.descricao, criado_em=entity.criado_em)

    def to_dict(self) -> dict:
        return {"descricao": self.descricao, "criado_em": _iso(self.criado_em)}


@dataclass
class TicketDetalheDTO:
    """
    Ticket com comentários (já filtrados por visibilidade),
    anexos e histórico de ações.
    """

    ticket: TicketOutputDTO
    comentarios: List[ComentarioOutputDTO] = field(default_factory=list)
    anexos: List[AnexoOutputDTO] = field(default_factory=list)
    acoes: List[AcaoOutputDTO] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = self.ticket.to_dict()
        data["comentarios"] = [c.to_dict() for c in self.comentarios]
        data["anexos"] = [a.to_dict() for a in self.anexos]
        data["acoes"] = [a.to_dict() for a in self.acoes]
        return data


# =============================================================================
# QUERY DTOs (Filtros de Busca)
# =============================================================================

@dataclass(frozen=True)
class ListarTicketsQueryDTO:
    """
    DTO para parâmetros de busca/filtro de tickets.

    Attributes:
        status: Filtrar por status; sem ele, Cancelados ficam de fora
        prioridade: Filtrar por prioridade
        titulo: Trecho do título (sem diferenciar caixa)
        criado_de / criado_ate: Intervalo de criação (inclusivo)
        solicitante_id / responsavel_id / categoria_id: Envolvidos
        prazo_de / prazo_ate: Intervalo do prazo de SLA (inclusivo)
        apenas_atrasados: Prazo vencido em tickets ativos
        pagina: Número da página (1-indexed)
        por_pagina: Itens por página
    """

    status: Optional[str] = None
    prioridade: Optional[str] = None
    titulo: Optional[str] = None
    criado_de: Optional[datetime] = None
    criado_ate: Optional[datetime] = None
    solicitante_id: Optional[str] = None
    responsavel_id: Optional[str] = None
    categoria_id: Optional[str] = None
    prazo_de: Optional[datetime] = None
    prazo_ate: Optional[datetime] = None
    apenas_atrasados: bool = False
    pagina: int = 1
    por_pagina: int = 20


@dataclass
class PaginatedResultDTO:
    """
    DTO para resultados paginados.

    Attributes:
        items: Lista de itens da página atual
        total: Total de itens (sem paginação)
        pagina: Página atual
        por_pagina: Itens por página
    """

    items: List[TicketListItemDTO]
    total: int
    pagina: int
    por_pagina: int

    @property
    def total_paginas(self) -> int:
        if self.por_pagina <= 0:
            return 0
        return (self.total + self.por_pagina - 1) // self.por_pagina

    @property
    def tem_proxima(self) -> bool:
        return self.pagina < self.total_paginas

    @property
    def tem_anterior(self) -> bool:
        return self.pagina > 1

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "pagina": self.pagina,
            "por_pagina": self.por_pagina,
            "total_paginas": self.total_paginas,
            "tem_proxima": self.tem_proxima,
            "tem_anterior": self.tem_anterior,
        }
