"""
Testes das notificações por e-mail (backend locmem).
"""

from unittest.mock import patch

from django.core import mail
import pytest

from src.adapters.django_app.notifications.services import (
    EmailNotificationDispatcher,
    EmailService,
    NotificationDeliveryError,
    assunto_da_acao,
    normalizar_destinatarios,
)
from src.core.tickets.entities import TicketEntity, TicketPriority


@pytest.fixture
def ticket(ticket_repo, requester, agent, categoria, relogio):
    ticket = TicketEntity.criar(
        "Servidor de arquivos lento", "Acesso ao \\\\files demora minutos",
        TicketPriority.ALTA, requester.id, categoria.id, relogio(),
    )
    ticket.atribuir_a(agent, relogio())
    ticket_repo.save(ticket)
    return ticket


@pytest.fixture
def dispatcher(ticket_repo, usuario_repo, categoria_repo):
    return EmailNotificationDispatcher(
        ticket_repo, usuario_repo, categoria_repo, EmailService(desabilitar_envio=False),
    )


class TestDestinatarios:

    def test_sem_vazios_nem_repetidos(self):
        assert normalizar_destinatarios(
            ["a@acme.com", None, " ", "A@ACME.COM", "b@acme.com"]
        ) == ["a@acme.com", "b@acme.com"]

    def test_assunto_resumido(self):
        assunto = assunto_da_acao("t-1", "Título do chamado alterado para: 'x' - por Alice")

        assert assunto == "[HelpDesk] Ticket #t-1 — Título do chamado alterado."


class TestEmailNotificationDispatcher:

    def test_notificar_acao(self, dispatcher, ticket, manager):
        dispatcher.notificar_acao(ticket.id, "Prioridade alterada para Crítica por Clara Thompson",
                                  email_extra=manager.email)

        assert len(mail.outbox) == 1
        email = mail.outbox[0]
        assert email.to == ["alice.johnson@acme.com", "bob.miller@acme.com", "clara.thompson@acme.com"]
        assert email.subject == (
            f"[HelpDesk] Ticket #{ticket.id} — Prioridade alterada para Crítica por Clara Thompson"
        )
        html = email.alternatives[0][0]
        assert "Servidor de arquivos lento" in html
        assert "Infraestrutura" in html
        assert "NoReply" in html

    def test_email_extra_repetido(self, dispatcher, ticket, agent):
        dispatcher.notificar_acao(ticket.id, "x", email_extra=agent.email.upper())

        assert mail.outbox[0].to == ["alice.johnson@acme.com", "bob.miller@acme.com"]

    def test_categoria_removida(self, dispatcher, ticket, categoria_repo, categoria):
        categoria_repo.delete(categoria.id)

        dispatcher.notificar_acao(ticket.id, "x")

        assert "(categoria removida)" in mail.outbox[0].alternatives[0][0]

    def test_sem_destinatarios(self, dispatcher, ticket, usuario_repo, requester, agent):
        usuario_repo.delete(requester.id)
        usuario_repo.delete(agent.id)

        dispatcher.notificar_acao(ticket.id, "x")

        assert mail.outbox == []

    def test_alerta_sla(self, dispatcher, ticket):
        dispatcher.notificar_alerta_sla(ticket)

        email = mail.outbox[0]
        assert email.subject == f"⚠️ [HelpDesk] Alerta de SLA — Ticket #{ticket.id}"
        assert "próximo do vencimento de SLA" in email.body
        assert email.to == ["alice.johnson@acme.com", "bob.miller@acme.com"]


class TestEmailService:

    def test_envio_desabilitado(self):
        enviados = EmailService(desabilitar_envio=True).enviar(["a@acme.com"], "Assunto", "<p>oi</p>")

        assert enviados == 0
        assert mail.outbox == []

    def test_desabilitado_pelo_settings(self, settings):
        settings.HELPDESK_EMAIL_DISABLE_DELIVERY = True

        assert EmailService().enviar(["a@acme.com"], "Assunto", "<p>oi</p>") == 0

    def test_remetente(self, settings):
        settings.HELPDESK_EMAIL_FROM = "suporte@acme.com"
        settings.HELPDESK_EMAIL_FROM_NAME = "Suporte ACME"

        EmailService().enviar(["a@acme.com"], "Assunto", "<p>oi</p>")

        assert mail.outbox[0].from_email == "Suporte ACME <suporte@acme.com>"
        assert mail.outbox[0].body == "oi"

    def test_falha_de_transporte(self):
        with patch("django.core.mail.EmailMultiAlternatives.send", side_effect=OSError("smtp fora")):
            with pytest.raises(NotificationDeliveryError):
                EmailService(desabilitar_envio=False).enviar(["a@acme.com"], "Assunto", "<p>oi</p>")
