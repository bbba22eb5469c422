"""
Política de SLA.

Funções puras, sem efeitos colaterais:
- duracao_sla: prioridade -> duração da janela
- calcular_prazo: início + duração
- deve_alertar: se o ticket cruzou o limiar de alerta da janela

SLA por Prioridade:
    CRÍTICA: 8 horas
    ALTA: 24 horas
    MÉDIA: 48 horas
    demais (BAIXA): 72 horas
"""

from datetime import datetime, timedelta

from .enums import TicketPriority

SLA_HORAS = {
    TicketPriority.CRITICA: 8,
    TicketPriority.ALTA: 24,
    TicketPriority.MEDIA: 48,
}
SLA_HORAS_PADRAO = 72

LIMIAR_ALERTA_PADRAO = 0.85


def duracao_sla(prioridade: TicketPriority) -> timedelta:
    return timedelta(hours=SLA_HORAS.get(prioridade, SLA_HORAS_PADRAO))


def calcular_prazo(inicio: datetime, prioridade: TicketPriority) -> datetime:
    return inicio + duracao_sla(prioridade)


def deve_alertar(ticket, agora: datetime, limiar: float = LIMIAR_ALERTA_PADRAO) -> bool:
    """
    Decide se o ticket deve gerar alerta de SLA.

    Falso quando não há prazo, o ticket não está ativo, o prazo já
    venceu ou a janela é degenerada. Verdadeiro quando a fração
    decorrida da janela é >= limiar (o limite exato conta).

    Args:
        ticket: Objeto com `status`, `sla_inicio_em` e `sla_prazo`
        agora: Instante de referência
        limiar: Fração da janela que dispara o alerta
    """
    if ticket.sla_prazo is None or not ticket.status.esta_ativo:
        return False

    if ticket.sla_prazo <= agora:
        return False

    janela = ticket.sla_prazo - ticket.sla_inicio_em
    if janela <= timedelta(0):
        return False

    decorrido = agora - ticket.sla_inicio_em
    return decorrido / janela >= limiar
