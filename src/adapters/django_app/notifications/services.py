"""
Notificações por e-mail.

- EmailService: envio HTML via infraestrutura de e-mail do Django
  (backend SMTP em produção, locmem em testes)
- EmailNotificationDispatcher: implementa o NotificationDispatcher do
  Core; resolve destinatários e monta assunto/corpo

Destinatários de um ticket: e-mails do solicitante e do responsável,
mais o e-mail extra opcional, sem vazios e sem repetição (comparação
sem distinção de maiúsculas). Sem destinatários, nada é enviado.
"""

from datetime import datetime
from typing import Iterable, List, Optional
import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone
from django.utils.html import escape, strip_tags

from src.core.cadastros.ports import CategoriaRepository, UsuarioRepository
from src.core.tickets.dtos import CATEGORIA_REMOVIDA
from src.core.tickets.entities import TicketEntity
from src.core.tickets.ports import TicketRepository

logger = logging.getLogger(__name__)

PREFIXO_ASSUNTO = "[HelpDesk]"
RODAPE = "Mensagem automática do HelpDesk - NoReply"

ASSUNTOS_RESUMIDOS = (
    "Título do chamado alterado.",
    "Descrição do chamado alterada.",
)


class NotificationDeliveryError(Exception):
    """Falha de transporte ao enviar e-mail (o handler Celery re-tenta)."""


def normalizar_destinatarios(emails: Iterable[Optional[str]]) -> List[str]:
    """Remove vazios e duplicados (case-insensitive), preservando a ordem."""
    vistos = set()
    resultado = []
    for email in emails:
        email = (email or "").strip()
        if not email or email.lower() in vistos:
            continue
        vistos.add(email.lower())
        resultado.append(email)
    return resultado


def assunto_da_acao(ticket_id: str, descricao: str) -> str:
    """
    Assunto do e-mail de ação.

    Alterações de título/descrição usam um resumo fixo (o texto
    completo traz o conteúdo antigo e o novo).
    """
    descricao = (descricao or "").strip()
    nucleo = descricao
    for resumo in ASSUNTOS_RESUMIDOS:
        if descricao.lower().startswith(resumo.rstrip(".").lower()):
            nucleo = resumo
            break
    return f"{PREFIXO_ASSUNTO} Ticket #{ticket_id} — {nucleo}"


def assunto_alerta_sla(ticket_id: str) -> str:
    return f"⚠️ {PREFIXO_ASSUNTO} Alerta de SLA — Ticket #{ticket_id}"


class EmailService:
    """
    Envio de e-mails HTML.

    Com `desabilitar_envio` ligado (HELPDESK_EMAIL_DISABLE_DELIVERY),
    apenas registra em log e não envia.
    """

    def __init__(
        self,
        remetente: Optional[str] = None,
        desabilitar_envio: Optional[bool] = None,
    ):
        self.remetente = remetente or _remetente_padrao()
        if desabilitar_envio is None:
            desabilitar_envio = getattr(settings, "HELPDESK_EMAIL_DISABLE_DELIVERY", False)
        self.desabilitar_envio = desabilitar_envio

    def enviar(self, destinatarios: Iterable[Optional[str]], assunto: str, html: str) -> int:
        """
        Envia um e-mail para todos os destinatários.

        Returns:
            Quantidade de destinatários efetivos (0 se nada foi enviado)

        Raises:
            NotificationDeliveryError: Falha no backend de e-mail
        """
        if self.desabilitar_envio:
            logger.info(f"[EmailService] Envio desabilitado - e-mail suprimido. Assunto: {assunto}")
            return 0

        destinatarios = normalizar_destinatarios(destinatarios)
        if not destinatarios:
            logger.warning(f"Sem destinatários para {assunto}")
            return 0

        mensagem = EmailMultiAlternatives(
            subject=assunto,
            body=strip_tags(html),
            from_email=self.remetente,
            to=destinatarios,
        )
        mensagem.attach_alternative(html, "text/html")

        try:
            mensagem.send(fail_silently=False)
        except Exception as e:
            raise NotificationDeliveryError(f"Falha ao enviar '{assunto}': {e}") from e

        logger.info(f"E-mail enviado para {len(destinatarios)} destinatários: {', '.join(destinatarios)}")
        return len(destinatarios)


def _remetente_padrao() -> str:
    nome = getattr(settings, "HELPDESK_EMAIL_FROM_NAME", "HelpDesk")
    email = getattr(settings, "HELPDESK_EMAIL_FROM", None) or settings.DEFAULT_FROM_EMAIL
    return f"{nome} <{email}>" if nome else email


def _formatar_data(valor: Optional[datetime]) -> str:
    if valor is None:
        return "-"
    if timezone.is_aware(valor):
        valor = timezone.localtime(valor)
    return valor.strftime("%d/%m/%Y %H:%M")


class EmailNotificationDispatcher:
    """
    NotificationDispatcher do Core implementado com e-mail.

    Recarrega o ticket e os participantes no momento do envio, para
    refletir o estado já confirmado pela transação.
    """

    def __init__(
        self,
        ticket_repo: TicketRepository,
        usuario_repo: UsuarioRepository,
        categoria_repo: CategoriaRepository,
        email_service: EmailService,
    ):
        self.ticket_repo = ticket_repo
        self.usuario_repo = usuario_repo
        self.categoria_repo = categoria_repo
        self.email_service = email_service

    def notificar_acao(
        self,
        ticket_id: str,
        descricao: str,
        email_extra: Optional[str] = None,
    ) -> None:
        logger.info(f"Ticket #{ticket_id} ação: {descricao}")

        ticket = self.ticket_repo.get_by_id(ticket_id)
        destinatarios = self._emails_participantes(ticket) + [email_extra]
        destinatarios = normalizar_destinatarios(destinatarios)
        if not destinatarios:
            return

        assunto = assunto_da_acao(ticket_id, descricao)
        corpo = f"<p>{escape((descricao or '').strip())}</p>"
        cartao = self._cartao(ticket, alerta=False) if ticket else None

        self.email_service.enviar(destinatarios, assunto, self._layout(assunto, corpo, cartao))

    def notificar_alerta_sla(self, ticket: TicketEntity) -> None:
        destinatarios = normalizar_destinatarios(self._emails_participantes(ticket))
        if not destinatarios:
            return

        assunto = assunto_alerta_sla(ticket.id)
        corpo = (
            f'<p>O ticket <strong style="color:#d00000">#{ticket.id}</strong> '
            f'("<strong style="color:#d00000">{escape(ticket.titulo)}</strong>") '
            f'está <strong style="color:#d00000">próximo do vencimento de SLA</strong>.</p>'
            f"<p>Por favor, priorize a resolução antes do prazo final.</p>"
        )

        self.email_service.enviar(
            destinatarios,
            assunto,
            self._layout(assunto, corpo, self._cartao(ticket, alerta=True)),
        )

    def _emails_participantes(self, ticket: Optional[TicketEntity]) -> List[Optional[str]]:
        if ticket is None:
            return []
        emails = []
        for usuario_id in (ticket.solicitante_id, ticket.responsavel_id):
            usuario = self.usuario_repo.get_by_id(usuario_id) if usuario_id else None
            if usuario:
                emails.append(usuario.email)
        return emails

    def _cartao(self, ticket: TicketEntity, alerta: bool) -> str:
        categoria_nome = CATEGORIA_REMOVIDA
        if ticket.categoria_id:
            categoria = self.categoria_repo.get_by_id(ticket.categoria_id)
            if categoria:
                categoria_nome = categoria.nome

        fundo, borda, destaque = (
            ("#ffe6e6", "#ff4d4d", "#d00000") if alerta else ("#f5f5f5", "#ddd", "#000")
        )
        descricao = escape(ticket.descricao) if (ticket.descricao or "").strip() else "-"

        linhas = [
            ("Título", escape(ticket.titulo)),
            ("Status", escape(ticket.status.value)),
            ("Prioridade", escape(ticket.prioridade.value)),
            ("Categoria", escape(categoria_nome)),
            ("Criado em", _formatar_data(ticket.criado_em)),
            ("Vence em", _formatar_data(ticket.sla_prazo)),
        ]
        campos = "".join(
            f'<div style="margin:4px 0"><strong style="color:{destaque}">{rotulo}:</strong> {valor}</div>'
            for rotulo, valor in linhas
        )

        return (
            f'<div style="background:{fundo};border:1px solid {borda};'
            f'border-radius:8px;padding:12px;margin:16px 0">'
            f"{campos}"
            f'<div style="margin:4px 0"><strong style="color:{destaque}">Descrição:</strong></div>'
            f'<div style="white-space:pre-wrap;line-height:1.35">{descricao}</div>'
            f"</div>"
        )

    @staticmethod
    def _layout(titulo: str, corpo: str, bloco: Optional[str] = None) -> str:
        return (
            '<div style="font-family:Arial,Helvetica,sans-serif;font-size:14px">'
            f'<h2 style="margin:0 0 12px 0">{escape(titulo)}</h2>'
            f"<div>{corpo}</div>"
            '<hr style="margin:16px 0;"/>'
            f"{bloco or ''}"
            '<hr style="margin:16px 0;"/>'
            f'<div style="color:#666;font-size:12px;text-align:right">{RODAPE}</div>'
            "</div>"
        )
