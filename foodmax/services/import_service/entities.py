"""Import schemas for every FoodMax entity that accepts spreadsheets."""

from .constants import (
    CARDAPIO_ALIASES,
    CATEGORIA_ALIASES,
    CLIENTE_ALIASES,
    COMUNICACAO_ALIASES,
    DEFAULT_COUNTRY,
    DESTINATARIOS_TIPOS,
    ENTREGA_ALIASES,
    ESTABELECIMENTO_ALIASES,
    FINANCEIRO_ALIASES,
    FINANCEIRO_CATEGORIAS,
    FORMAS_PAGAMENTO,
    FORNECEDOR_ALIASES,
    ITEM_ALIASES,
    PEDIDO_ALIASES,
    STATUS_COMUNICACAO,
    STATUS_ENTREGA,
    STATUS_PEDIDO,
    TIPO_TRANSACAO_ALIASES,
    TIPOS_CARDAPIO,
    TIPOS_COMUNICACAO,
    TIPOS_ENTREGA,
    TIPOS_ESTABELECIMENTO,
    TIPOS_PEDIDO,
    TIPOS_TRANSACAO,
    UNIDADES_MEDIDA,
)
from .deduplication import composite_key, tax_id_or_name_key
from .errors import UnknownEntityError
from .schema import EntitySchema, FieldKind, FieldSpec, ForeignKeySpec, LineItemSpec

K = FieldKind

_ESTABELECIMENTO_REF = FieldSpec("estabelecimento_id", "Estabelecimento", K.REFERENCE, required=True)


def _contact_fields(phone_required: bool = False) -> tuple[FieldSpec, ...]:
    return (
        FieldSpec("email", "Email", K.EMAIL),
        FieldSpec("ddi", "DDI", K.DDI),
        FieldSpec("telefone", "Telefone", K.PHONE, required=phone_required),
    )


def _address_fields() -> tuple[FieldSpec, ...]:
    return (
        FieldSpec("cep", "CEP", K.CEP),
        FieldSpec("endereco", "Endereço"),
        FieldSpec("cidade", "Cidade"),
        FieldSpec("uf", "UF", K.UF),
        FieldSpec("pais", "País", default=DEFAULT_COUNTRY),
    )


ESTABELECIMENTOS = EntitySchema(
    name="estabelecimentos",
    label="Estabelecimentos",
    fields=(
        FieldSpec("nome", "Nome", required=True),
        FieldSpec("razao_social", "Razão Social"),
        FieldSpec("cnpj", "CNPJ", K.DIGITS),
        FieldSpec(
            "tipo_estabelecimento",
            "Tipo de Estabelecimento",
            K.CHOICE,
            default="Restaurante",
            choices=TIPOS_ESTABELECIMENTO,
        ),
        *_contact_fields(),
        *_address_fields(),
        FieldSpec("ativo", "Ativo", K.BOOL, default=True),
    ),
    header_aliases=ESTABELECIMENTO_ALIASES,
    key_fn=tax_id_or_name_key,
    supports_batch_import=True,
)

CLIENTES = EntitySchema(
    name="clientes",
    label="Clientes",
    fields=(
        _ESTABELECIMENTO_REF,
        FieldSpec("nome", "Nome", required=True),
        *_contact_fields(phone_required=True),
        FieldSpec("genero", "Gênero"),
        FieldSpec("profissao", "Profissão"),
        *_address_fields(),
        FieldSpec("aceita_promocao_email", "Aceita Promoção por Email", K.BOOL, default=False),
        FieldSpec("ativo", "Ativo", K.BOOL, default=True),
    ),
    header_aliases=CLIENTE_ALIASES,
    key_fn=composite_key("nome", "telefone"),
    foreign_keys=(ForeignKeySpec("estabelecimento_id", "estabelecimentos"),),
    supports_batch_import=True,
)

FORNECEDORES = EntitySchema(
    name="fornecedores",
    label="Fornecedores",
    fields=(
        FieldSpec("nome", "Nome", required=True),
        FieldSpec("razao_social", "Razão Social"),
        FieldSpec("cnpj", "CNPJ", K.DIGITS),
        FieldSpec("nome_responsavel", "Nome do Responsável"),
        *_contact_fields(),
        *_address_fields(),
        FieldSpec("ativo", "Ativo", K.BOOL, default=True),
    ),
    header_aliases=FORNECEDOR_ALIASES,
    key_fn=composite_key("nome"),
)

ITENS_CATEGORIAS = EntitySchema(
    name="itens-categorias",
    label="Categorias de Itens",
    fields=(
        FieldSpec("nome", "Nome", required=True),
        FieldSpec("descricao", "Descrição"),
        FieldSpec("ativo", "Ativo", K.BOOL, default=True),
    ),
    header_aliases=CATEGORIA_ALIASES,
    key_fn=composite_key("nome"),
)

ITENS = EntitySchema(
    name="itens",
    label="Itens",
    fields=(
        FieldSpec("categoria_id", "Categoria", K.REFERENCE, required=True),
        FieldSpec("nome", "Nome", required=True),
        FieldSpec("preco", "Preço", K.CURRENCY, required=True),
        FieldSpec("custo_pago", "Custo Pago", K.CURRENCY),
        FieldSpec("unidade_medida", "Unidade de Medida", K.CHOICE, default="Unidade", choices=UNIDADES_MEDIDA),
        FieldSpec("peso_gramas", "Peso (g)", K.INT),
        FieldSpec("estoque_atual", "Estoque Atual", K.INT),
        FieldSpec("ativo", "Ativo", K.BOOL, default=True),
    ),
    header_aliases=ITEM_ALIASES,
    key_fn=composite_key("nome", "categoria_id"),
    # Unknown categories are created on the fly
    foreign_keys=(ForeignKeySpec("categoria_id", "itens-categorias", fallback="none", create_missing=True),),
)

FINANCEIRO = EntitySchema(
    name="financeiro",
    label="Financeiro",
    fields=(
        _ESTABELECIMENTO_REF,
        FieldSpec(
            "tipo",
            "Tipo",
            K.CHOICE,
            required=True,
            choices=TIPOS_TRANSACAO,
            choice_aliases=TIPO_TRANSACAO_ALIASES,
        ),
        FieldSpec("categoria", "Categoria", K.CHOICE, required=True, choices=FINANCEIRO_CATEGORIAS),
        FieldSpec("valor", "Valor", K.CURRENCY, required=True),
        FieldSpec("data_transacao", "Data da Transação", K.DATETIME, required=True),
        FieldSpec("descricao", "Descrição"),
        FieldSpec("ativo", "Ativo", K.BOOL, default=True),
    ),
    header_aliases=FINANCEIRO_ALIASES,
    foreign_keys=(ForeignKeySpec("estabelecimento_id", "estabelecimentos"),),
)

ENTREGAS = EntitySchema(
    name="entregas",
    label="Entregas",
    fields=(
        _ESTABELECIMENTO_REF,
        FieldSpec("tipo_entrega", "Tipo de Entrega", K.CHOICE, required=True, choices=TIPOS_ENTREGA),
        FieldSpec("codigo_pedido_app", "Código do Pedido"),
        FieldSpec("valor_pedido", "Valor do Pedido", K.CURRENCY, required=True),
        FieldSpec("taxa_extra", "Taxa Extra", K.CURRENCY, default=0),
        FieldSpec("valor_entrega", "Valor da Entrega", K.CURRENCY, default=0),
        FieldSpec("forma_pagamento", "Forma de Pagamento", K.CHOICE, required=True, choices=FORMAS_PAGAMENTO),
        FieldSpec("cliente_nome", "Cliente"),
        *_contact_fields(),
        *_address_fields(),
        FieldSpec("data_hora_saida", "Data/Hora Saída", K.DATETIME),
        FieldSpec("data_hora_entregue", "Data/Hora Entregue", K.DATETIME),
        FieldSpec("observacao", "Observação"),
        FieldSpec("status", "Status", K.CHOICE, default="Pendente", choices=STATUS_ENTREGA),
    ),
    header_aliases=ENTREGA_ALIASES,
    foreign_keys=(ForeignKeySpec("estabelecimento_id", "estabelecimentos"),),
)

COMUNICACOES = EntitySchema(
    name="comunicacoes",
    label="Comunicações",
    fields=(
        _ESTABELECIMENTO_REF,
        FieldSpec("tipo_comunicacao", "Tipo de Comunicação", K.CHOICE, required=True, choices=TIPOS_COMUNICACAO),
        FieldSpec("assunto", "Assunto", required=True),
        FieldSpec("mensagem", "Mensagem", required=True),
        FieldSpec(
            "destinatarios_tipo",
            "Destinatários",
            K.CHOICE,
            default="TodosClientes",
            choices=DESTINATARIOS_TIPOS,
        ),
        FieldSpec("destinatarios_text", "Destinatários (texto)"),
        FieldSpec("status", "Status", K.CHOICE, default="Pendente", choices=STATUS_COMUNICACAO),
    ),
    header_aliases=COMUNICACAO_ALIASES,
    foreign_keys=(ForeignKeySpec("estabelecimento_id", "estabelecimentos"),),
)

CARDAPIOS = EntitySchema(
    name="cardapios",
    label="Cardápios",
    fields=(
        FieldSpec("nome", "Nome", required=True),
        FieldSpec("tipo_cardapio", "Tipo de Cardápio", K.CHOICE, required=True, choices=TIPOS_CARDAPIO),
        FieldSpec("quantidade_total", "Quantidade Total", K.INT, default=0),
        FieldSpec("preco_itens_centavos", "Preço dos Itens", K.CURRENCY, default=0),
        FieldSpec("margem_lucro_percentual", "Margem de Lucro", K.PERCENT, required=True),
        FieldSpec("preco_total_centavos", "Preço Total", K.CURRENCY, required=True),
        FieldSpec("descricao", "Descrição"),
        FieldSpec("ativo", "Ativo", K.BOOL, default=True),
        FieldSpec("item_id", "Item", K.REFERENCE),
        FieldSpec("item_quantidade", "Item Quantidade", K.INT, default=1),
        FieldSpec("item_valor_unitario", "Item Valor Unitário", K.CURRENCY, default=0),
    ),
    header_aliases=CARDAPIO_ALIASES,
    key_fn=composite_key("nome", "tipo_cardapio"),
    foreign_keys=(ForeignKeySpec("item_id", "itens", fallback="none"),),
    # One row per menu item; rows of the same menu are folded together
    line_items=LineItemSpec(
        target="itens",
        columns={
            "item_id": "item_id",
            "item_quantidade": "quantidade",
            "item_valor_unitario": "valor_unitario_centavos",
        },
        anchor="item_id",
    ),
)

PEDIDOS = EntitySchema(
    name="pedidos",
    label="Pedidos",
    fields=(
        _ESTABELECIMENTO_REF,
        FieldSpec("codigo", "Código"),
        FieldSpec("tipo_pedido", "Tipo de Pedido", K.CHOICE, required=True, choices=TIPOS_PEDIDO),
        FieldSpec("valor_total", "Valor Total", K.CURRENCY, required=True),
        FieldSpec("data_hora_finalizado", "Data/Hora Finalizado", K.DATETIME),
        FieldSpec("observacao", "Observação"),
        FieldSpec("status", "Status", K.CHOICE, default="Pendente", choices=STATUS_PEDIDO),
    ),
    header_aliases=PEDIDO_ALIASES,
    key_fn=composite_key("codigo"),
    foreign_keys=(ForeignKeySpec("estabelecimento_id", "estabelecimentos"),),
)

ENTITY_SCHEMAS: dict[str, EntitySchema] = {
    schema.name: schema
    for schema in (
        ESTABELECIMENTOS,
        CLIENTES,
        FORNECEDORES,
        ITENS_CATEGORIAS,
        ITENS,
        FINANCEIRO,
        ENTREGAS,
        COMUNICACOES,
        CARDAPIOS,
        PEDIDOS,
    )
}


def get_schema(name: str) -> EntitySchema:
    """Look up an entity schema by its API name.

    Raises:
        UnknownEntityError: If no schema is registered under ``name``.
    """
    try:
        return ENTITY_SCHEMAS[name]
    except KeyError:
        raise UnknownEntityError(name) from None
