#!/usr/bin/env python
"""
Setup rápido para desenvolvimento local.

Este script:
1. Configura Django settings
2. Executa migrations
3. Popula o diretório padrão de usuários e categorias (opcional)

Uso (a partir da raiz do projeto):
    python -m scripts.quick_setup
    python -m scripts.quick_setup --with-seed
    python -m scripts.quick_setup --check-only
"""

import argparse
import os

USUARIOS_PADRAO = [
    ("Alice Johnson", "alice.johnson@acme.com", "Requester"),
    ("Bob Miller", "bob.miller@acme.com", "Agent"),
    ("Clara Thompson", "clara.thompson@acme.com", "Manager"),
    ("David Anderson", "david.anderson@acme.com", "Requester"),
    ("Emily Carter", "emily.carter@acme.com", "Agent"),
    ("Frank Harris", "frank.harris@acme.com", "Manager"),
    ("Grace Lewis", "grace.lewis@acme.com", "Requester"),
    ("Henry Clark", "henry.clark@acme.com", "Agent"),
    ("Isabella Scott", "isabella.scott@acme.com", "Manager"),
    ("Jack Wilson", "jack.wilson@acme.com", "Requester"),
]

# (categoria pai, subcategoria)
CATEGORIAS_PADRAO = [
    ("Infraestrutura", "Serviços em Nuvem"),
    ("Aplicações", "Bancos de Dados"),
    ("Redes", "LAN/WAN"),
    ("Segurança", "Firewall"),
    ("Suporte", "Central de Ajuda"),
]


def setup_django():
    """Configura Django para uso standalone."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'src.config.settings')

    import django
    django.setup()


def run_migrations():
    """Executa migrations."""
    from django.core.management import call_command

    print("📦 Executando migrations...")
    call_command('migrate', verbosity=1)
    print("✅ Migrations concluídas!")


def seed_diretorio():
    """
    Cria usuários e categorias padrão que ainda não existem.

    Idempotente: usuários são identificados pelo e-mail e
    categorias pelo nome.

    Returns:
        (usuários criados, categorias criadas)
    """
    from src.core.cadastros.entities import CategoriaEntity, UserRole, UsuarioEntity
    from src.adapters.django_app.tickets.repositories import (
        DjangoCategoriaRepository,
        DjangoUsuarioRepository,
    )

    usuarios = DjangoUsuarioRepository()
    categorias = DjangoCategoriaRepository()
    novos_usuarios = novas_categorias = 0

    for nome, email, papel in USUARIOS_PADRAO:
        if usuarios.get_by_email(email):
            continue
        usuarios.save(UsuarioEntity.criar(nome, email, UserRole.from_string(papel)))
        novos_usuarios += 1

    def _garantir(nome, parent_id=None):
        nonlocal novas_categorias
        existente = categorias.get_by_nome(nome)
        if existente:
            return existente
        categoria = CategoriaEntity.criar(nome, parent_id)
        categorias.save(categoria)
        novas_categorias += 1
        return categoria

    for pai, filha in CATEGORIAS_PADRAO:
        _garantir(filha, _garantir(pai).id)

    return novos_usuarios, novas_categorias


def check_connection():
    """Verifica conexão com o banco."""
    from django.db import connection

    print("🔍 Verificando conexão com o banco...")

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        print("✅ Conexão OK!")
        return True
    except Exception as e:
        print(f"❌ Erro de conexão: {e}")
        return False


def show_info():
    """Mostra informações do setup."""
    from django.conf import settings

    print("\n" + "=" * 60)
    print("📊 Informações do Setup")
    print("=" * 60)
    print(f"  Database Engine: {settings.DATABASES['default']['ENGINE']}")
    print(f"  Database Name: {settings.DATABASES['default']['NAME']}")
    print(f"  Eventos: {settings.EVENT_PUBLISHER_MODE}")
    print("=" * 60)
    print("\n🚀 Próximos passos:")
    print("   1. python manage.py runserver")
    print("   2. Acesse: http://localhost:8000/admin/")
    print("   3. API: http://localhost:8000/api/tickets/ (header X-User-Id)")
    print("\n")


def main():
    parser = argparse.ArgumentParser(description='Setup rápido para desenvolvimento')
    parser.add_argument(
        '--with-seed',
        action='store_true',
        help='Criar usuários e categorias padrão'
    )
    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Apenas verificar conexão'
    )

    args = parser.parse_args()

    print("\n" + "=" * 60)
    print("🔧 HelpDesk - Quick Setup")
    print("=" * 60 + "\n")

    setup_django()

    if args.check_only:
        check_connection()
        return

    if not check_connection():
        print("\n⚠️  Certifique-se de que o banco de dados está rodando.")
        return

    run_migrations()

    if args.with_seed:
        usuarios, categorias = seed_diretorio()
        print(f"✅ {usuarios} usuários e {categorias} categorias criados!")

    show_info()


if __name__ == '__main__':
    main()
