"""
Testes do seed do diretório padrão (scripts/quick_setup.py).
"""

from scripts.quick_setup import seed_diretorio
from src.adapters.django_app.tickets.models import CategoriaModel, UsuarioModel


def test_seed_idempotente(db):
    assert seed_diretorio() == (10, 10)
    assert seed_diretorio() == (0, 0)

    assert UsuarioModel.objects.filter(papel="Manager").count() == 3
    assert CategoriaModel.objects.get(nome="LAN/WAN").parent.nome == "Redes"


def test_seed_preserva_existentes(db, requester, categoria):
    usuarios, categorias = seed_diretorio()

    assert usuarios == 9
    assert categorias == 9
    assert UsuarioModel.objects.get(email="alice.johnson@acme.com").id == requester.id
