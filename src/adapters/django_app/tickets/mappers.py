"""
Mappers para conversão entre Entities (Core) e Models (Django).

Responsabilidades:
- Converter Entity → Model (para persistência)
- Converter Model → Entity (para uso no Core)

Princípios:
- Mappers são stateless
- Não contêm lógica de negócio
- Tratam apenas conversão de dados (enums ↔ texto, FKs ↔ ids)
"""

from typing import List

from src.core.cadastros.entities import CategoriaEntity, UserRole, UsuarioEntity
from src.core.tickets.entities import (
    AnexoEntity,
    CommentVisibility,
    TicketAcaoEntity,
    TicketComentarioEntity,
    TicketEntity,
    TicketPriority,
    TicketStatus,
)

from .models import (
    AnexoModel,
    CategoriaModel,
    TicketAcaoModel,
    TicketComentarioModel,
    TicketModel,
    UsuarioModel,
)


class TicketMapper:
    """
    Mapper para conversão entre TicketEntity e TicketModel.

    - to_model(): Entity → Model
    - to_entity(): Model → Entity
    - campos_update(): valores para o UPDATE condicional por versão
    """

    @staticmethod
    def to_model(entity: TicketEntity) -> TicketModel:
        """
        Converte TicketEntity para TicketModel (novo registro).

        Note:
            Não chama .save() - deixa isso para o Repository
        """
        return TicketModel(
            id=entity.id,
            versao=1,
            **TicketMapper.campos_update(entity),
        )

    @staticmethod
    def campos_update(entity: TicketEntity) -> dict:
        return {
            "titulo": entity.titulo,
            "descricao": entity.descricao,
            "status": entity.status.value,
            "prioridade": entity.prioridade.value,
            "solicitante_id": entity.solicitante_id,
            "responsavel_id": entity.responsavel_id,
            "categoria_id": entity.categoria_id,
            "criado_em": entity.criado_em,
            "sla_inicio_em": entity.sla_inicio_em,
            "sla_prazo": entity.sla_prazo,
            "atribuido_em": entity.atribuido_em,
            "fechado_em": entity.fechado_em,
        }

    @staticmethod
    def to_entity(model: TicketModel) -> TicketEntity:
        """
        Converte TicketModel para TicketEntity.

        Note:
            Bypassa validações do factory method .criar()
            pois dados já foram validados na criação original
        """
        return TicketEntity(
            id=model.id,
            titulo=model.titulo,
            descricao=model.descricao,
            status=TicketStatus(model.status),
            prioridade=TicketPriority(model.prioridade),
            solicitante_id=model.solicitante_id,
            responsavel_id=model.responsavel_id,
            categoria_id=model.categoria_id,
            criado_em=model.criado_em,
            sla_inicio_em=model.sla_inicio_em,
            sla_prazo=model.sla_prazo,
            atribuido_em=model.atribuido_em,
            fechado_em=model.fechado_em,
            versao=model.versao,
        )

    @staticmethod
    def to_entity_list(models: List[TicketModel]) -> List[TicketEntity]:
        return [TicketMapper.to_entity(model) for model in models]


class TicketAcaoMapper:
    @staticmethod
    def to_model(entity: TicketAcaoEntity) -> TicketAcaoModel:
        return TicketAcaoModel(
            ticket_id=entity.ticket_id,
            descricao=entity.descricao,
            criado_em=entity.criado_em,
        )

    @staticmethod
    def to_entity(model: TicketAcaoModel) -> TicketAcaoEntity:
        return TicketAcaoEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            descricao=model.descricao,
            criado_em=model.criado_em,
        )


class ComentarioMapper:
    @staticmethod
    def to_model(entity: TicketComentarioEntity) -> TicketComentarioModel:
        return TicketComentarioModel(
            id=entity.id,
            ticket_id=entity.ticket_id,
            autor_id=entity.autor_id,
            visibilidade=entity.visibilidade.value,
            mensagem=entity.mensagem,
            criado_em=entity.criado_em,
        )

    @staticmethod
    def to_entity(model: TicketComentarioModel) -> TicketComentarioEntity:
        return TicketComentarioEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            autor_id=model.autor_id,
            visibilidade=CommentVisibility(model.visibilidade),
            mensagem=model.mensagem,
            criado_em=model.criado_em,
        )


class AnexoMapper:
    @staticmethod
    def to_model(entity: AnexoEntity) -> AnexoModel:
        return AnexoModel(
            id=entity.id,
            ticket_id=entity.ticket_id,
            nome_arquivo=entity.nome_arquivo,
            content_type=entity.content_type,
            tamanho_bytes=entity.tamanho_bytes,
            storage_key=entity.storage_key,
            url_publica=entity.url_publica,
            autor_id=entity.autor_id,
            enviado_em=entity.enviado_em,
        )

    @staticmethod
    def to_entity(model: AnexoModel) -> AnexoEntity:
        return AnexoEntity(
            id=model.id,
            ticket_id=model.ticket_id,
            nome_arquivo=model.nome_arquivo,
            content_type=model.content_type,
            tamanho_bytes=model.tamanho_bytes,
            storage_key=model.storage_key,
            url_publica=model.url_publica,
            autor_id=model.autor_id,
            enviado_em=model.enviado_em,
        )


class UsuarioMapper:
    @staticmethod
    def to_model(entity: UsuarioEntity) -> UsuarioModel:
        return UsuarioModel(
            id=entity.id,
            nome=entity.nome,
            email=entity.email,
            papel=entity.papel.value,
        )

    @staticmethod
    def to_entity(model: UsuarioModel) -> UsuarioEntity:
        return UsuarioEntity(
            id=model.id,
            nome=model.nome,
            email=model.email,
            papel=UserRole(model.papel),
        )


class CategoriaMapper:
    @staticmethod
    def to_model(entity: CategoriaEntity) -> CategoriaModel:
        return CategoriaModel(
            id=entity.id,
            nome=entity.nome,
            parent_id=entity.parent_id,
        )

    @staticmethod
    def to_entity(model: CategoriaModel) -> CategoriaEntity:
        return CategoriaEntity(
            id=model.id,
            nome=model.nome,
            parent_id=model.parent_id,
        )
