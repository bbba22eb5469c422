#!/usr/bin/env python
"""
Monitor de SLA standalone.

Alternativa ao Celery Beat para ambientes sem worker: roda o
MonitorSLA em laço, a cada SLA_MONITOR_INTERVAL_SECONDS, até receber
SIGINT/SIGTERM.

Uso (a partir da raiz do projeto):
    python -m scripts.monitor_sla
    python -m scripts.monitor_sla --uma-vez
"""

import argparse
import signal
import threading

from scripts.quick_setup import setup_django


def iniciar_monitor(parar: threading.Event, uma_vez: bool = False) -> int:
    """
    Executa o monitor montado pelo container.

    Returns:
        Alertas enviados (só no modo `uma_vez`; no laço, 0)
    """
    from src.config.container import get_container

    monitor = get_container().monitor_sla()

    if uma_vez:
        return monitor.executar_ciclo()

    monitor.executar(parar)
    return 0


def main():
    parser = argparse.ArgumentParser(description='Monitor de SLA dos tickets')
    parser.add_argument(
        '--uma-vez',
        action='store_true',
        help='Executar um único ciclo e sair'
    )

    args = parser.parse_args()

    setup_django()

    parar = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: parar.set())
    signal.signal(signal.SIGTERM, lambda *_: parar.set())

    enviados = iniciar_monitor(parar, uma_vez=args.uma_vez)
    if args.uma_vez:
        print(f"✅ {enviados} alertas de SLA enviados")


if __name__ == '__main__':
    main()
