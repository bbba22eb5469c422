"""
Entidades do Domínio de Tickets.

Este módulo define as entidades de domínio que encapsulam
regras de negócio relacionadas a chamados de suporte.

Entidades:
- TicketEntity: Agregado principal do domínio
- TicketAcaoEntity: Entrada imutável do histórico (auditoria)
- TicketComentarioEntity: Comentário público ou interno
- AnexoEntity: Metadados de arquivo anexado

Regras de Negócio Encapsuladas:
- Validação de dados na criação
- Cálculo e recálculo de SLA por prioridade
- Máquina de estados com exigência de ator por transição
- Participantes e "donos" do ticket
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Dict, Optional, Tuple
import uuid

from src.core.shared.exceptions import (
    BusinessRuleViolationError,
    ForbiddenError,
    InvalidTransitionError,
    ValidationError,
)
from src.core.cadastros.entities import UserRole, UsuarioEntity

from .enums import CommentVisibility, TicketPriority, TicketStatus
from .sla import calcular_prazo

# Transições do fluxo principal e quem pode executá-las.
# "responsavel": o agent atribuído; "solicitante": o requester do ticket.
TRANSICOES: Dict[Tuple[TicketStatus, TicketStatus], str] = {
    (TicketStatus.EM_ANALISE, TicketStatus.EM_ANDAMENTO): "responsavel",
    (TicketStatus.EM_ANDAMENTO, TicketStatus.RESOLVIDO): "responsavel",
    (TicketStatus.RESOLVIDO, TicketStatus.FECHADO): "solicitante",
}

FLUXO_VALIDO = "Em Análise -> Em Andamento -> Resolvido -> Fechado"


@dataclass
class TicketEntity:
    """
    Entidade de Domínio: Ticket.

    Agregado principal do domínio de suporte técnico.
    Encapsula todas as regras de negócio relacionadas a chamados.

    Invariantes:
    - Título obrigatório, até 180 caracteres
    - sla_prazo = sla_inicio_em + SLA(prioridade) sempre que um dos dois muda
    - Status só muda pelas transições permitidas
    - Ticket Fechado/Cancelado não aceita edição

    Attributes:
        id: Identificador único (UUID)
        titulo: Título descritivo do ticket
        descricao: Descrição detalhada do problema
        status: Estado atual do ticket
        prioridade: Nível de prioridade
        solicitante_id: Requester (nulo se o usuário foi excluído)
        responsavel_id: Agent atribuído
        categoria_id: Categoria (nula se a categoria foi excluída)
        criado_em: Data/hora de criação
        sla_inicio_em: Início da janela de SLA corrente
        sla_prazo: Fim da janela de SLA corrente
        atribuido_em: Data/hora da última atribuição
        fechado_em: Data/hora de fechamento ou cancelamento
        versao: Versão da linha (controle de concorrência otimista)

    Example:
        ticket = TicketEntity.criar(
            titulo="Impressora offline",
            descricao="A impressora do 2º andar não responde",
            prioridade=TicketPriority.ALTA,
            solicitante_id="user-123",
            categoria_id="cat-1",
            agora=agora(),
        )
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    titulo: str = ""
    descricao: str = ""

    status: TicketStatus = TicketStatus.NOVO
    prioridade: TicketPriority = TicketPriority.MEDIA

    solicitante_id: Optional[str] = None
    responsavel_id: Optional[str] = None
    categoria_id: Optional[str] = None

    criado_em: Optional[datetime] = None
    sla_inicio_em: Optional[datetime] = None
    sla_prazo: Optional[datetime] = None
    atribuido_em: Optional[datetime] = None
    fechado_em: Optional[datetime] = None

    versao: int = 0

    TITULO_MAX_LENGTH: ClassVar[int] = 180

    @classmethod
    def criar(
        cls,
        titulo: str,
        descricao: str,
        prioridade: TicketPriority,
        solicitante_id: str,
        categoria_id: Optional[str],
        agora: datetime,
    ) -> "TicketEntity":
        """
        Factory method para criar ticket com validações.

        O ticket nasce com status NOVO e com a janela de SLA
        começando no instante da criação.

        Raises:
            ValidationError: Se título ou descrição inválidos
        """
        ticket = cls(
            titulo=cls.validar_titulo(titulo),
            descricao=cls.validar_descricao(descricao),
            prioridade=prioridade,
            solicitante_id=solicitante_id,
            categoria_id=categoria_id,
            status=TicketStatus.NOVO,
            criado_em=agora,
        )
        ticket._reiniciar_sla(agora)
        return ticket

    @classmethod
    def validar_titulo(cls, titulo: Optional[str]) -> str:
        """Retorna o título sem espaços nas pontas, ou lança ValidationError."""
        if not titulo or not titulo.strip():
            raise ValidationError("Título é obrigatório.", field="titulo")

        titulo = titulo.strip()
        if len(titulo) > cls.TITULO_MAX_LENGTH:
            raise ValidationError(
                f"Título excede o limite de {cls.TITULO_MAX_LENGTH} caracteres "
                f"(atual: {len(titulo)}).",
                field="titulo",
            )
        return titulo

    @classmethod
    def validar_descricao(cls, descricao: Optional[str]) -> str:
        if not descricao or not descricao.strip():
            raise ValidationError("Descrição é obrigatória.", field="descricao")
        return descricao.strip()

    # =========================================================================
    # Consultas
    # =========================================================================

    @property
    def esta_ativo(self) -> bool:
        return self.status.esta_ativo

    def esta_atrasado_em(self, agora: datetime) -> bool:
        return self.esta_ativo and self.sla_prazo is not None and self.sla_prazo < agora

    def is_dono(self, usuario: UsuarioEntity) -> bool:
        """Manager, ou o Requester que é o solicitante deste ticket."""
        if usuario.papel == UserRole.MANAGER:
            return True
        return usuario.papel == UserRole.REQUESTER and usuario.id == self.solicitante_id

    def is_participante(self, usuario: UsuarioEntity) -> bool:
        """Manager, solicitante ou responsável atual."""
        return (
            usuario.papel == UserRole.MANAGER
            or usuario.id == self.solicitante_id
            or usuario.id == self.responsavel_id
        )

    def pode_ver(self, comentario: "TicketComentarioEntity", usuario: UsuarioEntity) -> bool:
        if comentario.visibilidade == CommentVisibility.PUBLICO:
            return True
        return self.is_participante(usuario)

    # =========================================================================
    # Alterações de campos (retornam True se algo mudou)
    # =========================================================================

    def alterar_titulo(self, titulo: str) -> bool:
        titulo = self.validar_titulo(titulo)
        if titulo == self.titulo:
            return False
        self.titulo = titulo
        return True

    def alterar_descricao(self, descricao: str) -> bool:
        descricao = self.validar_descricao(descricao)
        if descricao == self.descricao:
            return False
        self.descricao = descricao
        return True

    def alterar_prioridade(self, prioridade: TicketPriority, agora: datetime) -> bool:
        """Troca a prioridade e reinicia a janela de SLA a partir de `agora`."""
        if prioridade == self.prioridade:
            return False
        self.prioridade = prioridade
        self._reiniciar_sla(agora)
        return True

    def alterar_categoria(self, categoria_id: str) -> bool:
        if categoria_id == self.categoria_id:
            return False
        self.categoria_id = categoria_id
        return True

    # =========================================================================
    # Workflow
    # =========================================================================

    def atribuir_a(self, agente: UsuarioEntity, agora: datetime) -> None:
        """
        Atribui ticket a um agent.

        Regras:
        - Ticket precisa estar ativo
        - Alvo precisa ter papel Agent
        - Primeira atribuição de um ticket NOVO o leva a EM_ANALISE

        Raises:
            BusinessRuleViolationError: Ticket inativo ou alvo não é Agent
        """
        self.exigir_ativo("Não é possível atribuir tickets não ativos.")

        if not agente.is_agent:
            raise BusinessRuleViolationError(
                f"Usuário '{agente.nome}' não é um Agent e não pode ser atribuído a este ticket.",
                rule="responsavel_deve_ser_agent",
            )

        self.responsavel_id = agente.id
        self.atribuido_em = agora

        if self.status == TicketStatus.NOVO:
            self.status = TicketStatus.EM_ANALISE

    def alterar_solicitante(self, solicitante: UsuarioEntity) -> None:
        self.exigir_ativo("Não é possível alterar o requester de tickets não ativos.")

        if solicitante.papel != UserRole.REQUESTER:
            raise BusinessRuleViolationError(
                f"Usuário '{solicitante.nome}' não é um Requester e não pode ser "
                f"atribuído a este ticket.",
                rule="solicitante_deve_ser_requester",
            )

        self.solicitante_id = solicitante.id

    def alterar_status(
        self,
        novo_status: TicketStatus,
        ator: UsuarioEntity,
        agora: datetime,
    ) -> TicketStatus:
        """
        Executa uma transição do fluxo principal.

        Transições válidas (e quem executa):
        - EM_ANALISE → EM_ANDAMENTO (responsável)
        - EM_ANDAMENTO → RESOLVIDO (responsável)
        - RESOLVIDO → FECHADO (solicitante)

        Reabertura e cancelamento têm métodos próprios e não
        passam por aqui.

        Returns:
            Status anterior

        Raises:
            InvalidTransitionError: Aresta fora do fluxo
            BusinessRuleViolationError: Parte exigida não definida no ticket
            ForbiddenError: Ator não é a parte exigida
        """
        anterior = self.status
        exigido = TRANSICOES.get((anterior, novo_status))

        if exigido is None:
            raise InvalidTransitionError(anterior.value, novo_status.value, FLUXO_VALIDO)

        if exigido == "responsavel":
            if not self.responsavel_id:
                raise BusinessRuleViolationError(
                    "Não há agent atribuído a este ticket para executar essa transição.",
                    rule="transicao_sem_responsavel",
                )
            autorizado = ator.id == self.responsavel_id
        else:
            if not self.solicitante_id:
                raise BusinessRuleViolationError(
                    "Não há requester atribuído a este ticket para executar essa transição.",
                    rule="transicao_sem_solicitante",
                )
            autorizado = ator.id == self.solicitante_id

        if not autorizado:
            raise ForbiddenError(
                f"Usuário não permitido para atualizar {anterior.value} -> {novo_status.value}.",
                rule=f"transicao_exige_{exigido}",
            )

        self.status = novo_status
        if novo_status == TicketStatus.FECHADO:
            self.fechado_em = agora

        return anterior

    def reabrir(self, motivo: Optional[str], agora: datetime) -> str:
        """
        Reabre ticket Resolvido/Fechado, voltando para EM_ANALISE.

        Limpa fechado_em e reinicia a janela de SLA com a
        prioridade atual.

        Returns:
            Motivo normalizado

        Raises:
            BusinessRuleViolationError: Status não permite ou motivo vazio
        """
        if self.status not in (TicketStatus.RESOLVIDO, TicketStatus.FECHADO):
            raise BusinessRuleViolationError(
                "Só reabre se Resolvido/Fechado.",
                rule="reabrir_somente_resolvido_fechado",
            )

        motivo = (motivo or "").strip()
        if not motivo:
            raise BusinessRuleViolationError(
                "O motivo da reabertura é obrigatório.",
                rule="motivo_obrigatorio",
            )

        self.status = TicketStatus.EM_ANALISE
        self.fechado_em = None
        self._reiniciar_sla(agora)
        return motivo

    def cancelar(self, motivo: Optional[str], agora: datetime) -> str:
        """
        Cancela ticket NOVO ou EM_ANALISE.

        Returns:
            Motivo normalizado

        Raises:
            BusinessRuleViolationError: Status não permite ou motivo vazio
        """
        if self.status not in (TicketStatus.NOVO, TicketStatus.EM_ANALISE):
            raise BusinessRuleViolationError(
                "Só cancela se Novo/Em Análise.",
                rule="cancelar_somente_novo_analise",
            )

        motivo = (motivo or "").strip()
        if not motivo:
            raise BusinessRuleViolationError(
                "O motivo do cancelamento é obrigatório.",
                rule="motivo_obrigatorio",
            )

        self.status = TicketStatus.CANCELADO
        self.fechado_em = agora
        return motivo

    def exigir_ativo(self, mensagem: str) -> None:
        if not self.esta_ativo:
            raise BusinessRuleViolationError(mensagem, rule="ticket_inativo")

    def _reiniciar_sla(self, agora: datetime) -> None:
        self.sla_inicio_em = agora
        self.sla_prazo = calcular_prazo(agora, self.prioridade)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TicketEntity):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(frozen=True)
class TicketAcaoEntity:
    """
    Entrada do histórico de um ticket (auditoria).

    Imutável. Criada apenas como efeito colateral de uma operação
    do ciclo de vida, na mesma transação da mudança de estado.
    """

    ticket_id: str
    descricao: str
    criado_em: datetime
    id: Optional[int] = None

    DESCRICAO_MAX_LENGTH: ClassVar[int] = 600

    @classmethod
    def registrar(cls, ticket_id: str, descricao: str, agora: datetime) -> "TicketAcaoEntity":
        return cls(
            ticket_id=ticket_id,
            descricao=descricao[: cls.DESCRICAO_MAX_LENGTH],
            criado_em=agora,
        )


@dataclass
class TicketComentarioEntity:
    """
    Comentário em um ticket.

    Regras:
    - Mensagem obrigatória, até 4000 caracteres
    - Apenas o autor edita ou exclui
    - Edição grava o prefixo "editado: " e renova o timestamp
    """

    ticket_id: str = ""
    autor_id: Optional[str] = None
    visibilidade: CommentVisibility = CommentVisibility.PUBLICO
    mensagem: str = ""
    criado_em: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    MENSAGEM_MAX_LENGTH: ClassVar[int] = 4000
    PREFIXO_EDICAO: ClassVar[str] = "editado: "

    @classmethod
    def criar(
        cls,
        ticket_id: str,
        autor_id: str,
        mensagem: str,
        visibilidade: CommentVisibility,
        agora: datetime,
    ) -> "TicketComentarioEntity":
        return cls(
            ticket_id=ticket_id,
            autor_id=autor_id,
            visibilidade=visibilidade,
            mensagem=cls.validar_mensagem(mensagem),
            criado_em=agora,
        )

    @classmethod
    def validar_mensagem(cls, mensagem: Optional[str]) -> str:
        if not mensagem or not mensagem.strip():
            raise ValidationError("Mensagem é obrigatória.", field="mensagem")

        mensagem = mensagem.strip()
        if len(mensagem) > cls.MENSAGEM_MAX_LENGTH:
            raise ValidationError(
                f"Mensagem excede o limite de {cls.MENSAGEM_MAX_LENGTH} caracteres "
                f"(atual: {len(mensagem)}).",
                field="mensagem",
            )
        return mensagem

    def editar(self, mensagem: str, agora: datetime) -> None:
        mensagem = self.validar_mensagem(mensagem)
        if mensagem == self.mensagem:
            raise BusinessRuleViolationError("Não houve mudança.", rule="edicao_sem_mudanca")
        self.mensagem = f"{self.PREFIXO_EDICAO}{mensagem}"
        self.criado_em = agora


@dataclass
class AnexoEntity:
    """Metadados de um arquivo anexado a um ticket."""

    ticket_id: str = ""
    nome_arquivo: str = ""
    content_type: str = ""
    tamanho_bytes: int = 0
    storage_key: str = ""
    url_publica: str = ""
    autor_id: Optional[str] = None
    enviado_em: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
