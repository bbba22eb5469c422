"""
Core Domain Layer - O Hexágono.

Lógica de negócio do HelpDesk, sem dependência de framework:
- shared: exceções, Domain Events, UnitOfWork/EventPublisher
- cadastros: usuários e categorias
- tickets: ciclo de vida, SLA, comentários e anexos

Testável sem banco de dados (repositórios em memória).
"""
