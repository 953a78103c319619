"""The tool catalog: every report the gateway exposes, in listing order.

Built once at import and read-only afterwards. ``list_tools()`` always yields
the same contracts in the same order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .contract import ConditionalRequirement, ToolContract
from .params import DateParam, EnumParam, NumberParam, StringArrayParam, StringParam

STORES: tuple[str, ...] = (
    "BOTAFOGO",
    "GAVEA",
    "FERRADURA",
    "TIJUCA",
    "LAPA",
    "LARANJEIRAS",
    "ROSAS",
    "RUFI_BAR",
    "MORRO_DA_URCA",
    "LEBLON",
)

PERIODS: tuple[str, ...] = ("hoje", "ontem", "semana_atual", "mes_atual", "custom")
PRODUCT_ORDERS: tuple[str, ...] = ("mais_vendidos", "menos_vendidos")


class Catalog:
    """Ordered, duplicate-free collection of tool contracts."""

    __slots__ = ("_contracts",)

    def __init__(self, contracts: Iterable[ToolContract] = ()) -> None:
        self._contracts: dict[str, ToolContract] = {}
        for contract in contracts:
            self.register(contract)

    def register(self, contract: ToolContract) -> None:
        if contract.name in self._contracts:
            raise ValueError(f"Tool '{contract.name}' already registered")
        self._contracts[contract.name] = contract

    def get(self, name: str) -> ToolContract | None:
        return self._contracts.get(name)

    def list_tools(self) -> tuple[ToolContract, ...]:
        return tuple(self._contracts.values())

    def names(self) -> tuple[str, ...]:
        return tuple(self._contracts)

    def describe(self) -> list[dict[str, object]]:
        """Catalog entries with their JSON schemas, ready for any transport."""
        return [c.describe() for c in self._contracts.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._contracts

    def __iter__(self) -> Iterator[ToolContract]:
        return iter(tuple(self._contracts.values()))

    def __len__(self) -> int:
        return len(self._contracts)


# ─────────────────────────────────────────────────────────────────────────────
# Shared parameter definitions
# ─────────────────────────────────────────────────────────────────────────────

def _start(required: bool, description: str = "Data inicial (YYYY-MM-DD)") -> DateParam:
    return DateParam(name="data_inicio", required=required, description=description)


def _end(required: bool, description: str = "Data final (YYYY-MM-DD)") -> DateParam:
    return DateParam(name="data_fim", required=required, description=description)


def _store(description: str = "Filtrar por loja específica") -> EnumParam:
    return EnumParam(name="loja", values=STORES, description=description)


_PERIOD = EnumParam(name="periodo", values=PERIODS, required=True, description="Período de análise")
_CUSTOM_PERIOD = ConditionalRequirement(field="periodo", equals="custom", then_required=("data_inicio", "data_fim"))


def _contracts() -> list[ToolContract]:
    stores = ", ".join(STORES)
    return [
        ToolContract(
            name="obter_vendas",
            category="vendas",
            description=(
                "Obtém dados gerais de vendas (faturamento, transações, ticket médio) "
                "de uma loja em um período.\n\n"
                "Retorna valor_total, quantidade_transacoes, ticket_medio, periodo e loja."
            ),
            params=(
                _start(True, "Data inicial (YYYY-MM-DD), ex: 2024-12-01"),
                _end(True, "Data final (YYYY-MM-DD), ex: 2024-12-15"),
                _store(f"Nome da loja (opcional). Lojas: {stores}"),
            ),
        ),
        ToolContract(
            name="comparar_vendas_lojas",
            category="vendas",
            description=(
                "Compara vendas entre todas as lojas em um período.\n\n"
                "Retorna lista com loja_nome, valor_total, quantidade_transacoes e ticket_medio."
            ),
            params=(_start(True), _end(True)),
        ),
        ToolContract(
            name="obter_produtos",
            category="produtos",
            description=(
                "Obtém ranking de produtos mais vendidos com filtros avançados. "
                "Com periodo=custom, data_inicio e data_fim são obrigatórios.\n\n"
                "Retorna produto_nome, categoria, quantidade_vendida, valor_total e percentual_total."
            ),
            params=(
                _PERIOD,
                _start(False, "Data inicial (YYYY-MM-DD) - obrigatório se periodo=custom"),
                _end(False, "Data final (YYYY-MM-DD) - obrigatório se periodo=custom"),
                StringParam(name="categoria", description="Filtrar por categoria (Chope, Cerveja, Comida, etc)"),
                NumberParam(name="limite", minimum=1, maximum=100, description="Quantidade de resultados (1-100, padrão 10)"),
                EnumParam(name="ordem", values=PRODUCT_ORDERS, description="Ordem dos resultados (padrão mais_vendidos)"),
                _store(),
            ),
            requires=(_CUSTOM_PERIOD,),
        ),
        ToolContract(
            name="obter_categorias",
            category="produtos",
            description="Lista todas as categorias de produtos disponíveis no sistema.",
        ),
        ToolContract(
            name="obter_performance_equipe",
            category="equipe",
            description=(
                "Obtém ranking de vendas da equipe (garçons/atendentes) com análise de mix. "
                "Com periodo=custom, data_inicio e data_fim são obrigatórios.\n\n"
                "Retorna employee_name, total_vendas, quantidade_transacoes, ticket_medio e "
                "percentuais de bebida, comida e outros."
            ),
            params=(_PERIOD, _start(False), _end(False), _store()),
            requires=(_CUSTOM_PERIOD,),
        ),
        ToolContract(
            name="obter_detalhe_funcionario",
            category="equipe",
            description="Obtém detalhamento de vendas por categoria de um funcionário específico.",
            params=(
                StringParam(name="nome", required=True, min_length=1, description="Nome do funcionário"),
                _start(True),
                _end(True),
            ),
        ),
        ToolContract(
            name="filtrar_clientes",
            category="clientes",
            description=(
                "Busca e filtra clientes com base em comportamento de consumo. Todos os filtros são opcionais.\n\n"
                "Casos de uso: clientes VIP (gasto_total_min=1000, frequencia_min=5), "
                "clientes sumidos (dias_sem_visita_min=45), fãs de IPA (categorias_consumidas=[\"IPA\"]).\n\n"
                "Retorna user_name, user_phone, user_email, gasto_total, frequencia_visitas, "
                "loja_preferida e dias_sem_visitar."
            ),
            params=(
                StringArrayParam(name="categorias_consumidas", description="Categorias consumidas"),
                StringArrayParam(name="produtos_consumidos", description="Produtos específicos"),
                NumberParam(name="gasto_total_min", minimum=0, description="Gasto mínimo"),
                NumberParam(name="gasto_total_max", minimum=0, description="Gasto máximo"),
                NumberParam(name="dias_sem_visita_min", minimum=0, description="Dias mínimos sem visitar"),
                NumberParam(name="frequencia_min", minimum=1, description="Frequência mínima de visitas"),
                _store(),
                _start(False, "Data inicial do período de análise (YYYY-MM-DD)"),
                _end(False, "Data final do período de análise (YYYY-MM-DD)"),
                NumberParam(name="limite", minimum=1, maximum=1000, description="Limite de resultados (1-1000, padrão 100)"),
            ),
        ),
        ToolContract(
            name="obter_perfil_cliente",
            category="clientes",
            description=(
                "Obtém perfil completo de um cliente específico com histórico e preferências.\n\n"
                "Retorna user_name, ltv, primeira_visita, ultima_visita, total_visitas, ticket_medio, "
                "produtos_favoritos, loja_preferida, categorias_preferidas e classificacao."
            ),
            params=(
                StringParam(name="identificador", required=True, min_length=1,
                            description="CPF, telefone ou email do cliente"),
            ),
        ),
    ]


CATALOG = Catalog(_contracts())


def list_tools() -> tuple[ToolContract, ...]:
    """All tool contracts in listing order."""
    return CATALOG.list_tools()


def get_contract(name: str) -> ToolContract | None:
    return CATALOG.get(name)
