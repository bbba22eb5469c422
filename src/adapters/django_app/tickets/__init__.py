"""App Django do HelpDesk: models, repositórios, API e admin."""
