"""Constants for the import service."""

# Maximum rows per import batch
MAX_ROWS = 1000

# Locale-tolerant boolean tokens (compared after trim + lowercase)
TRUTHY_TOKENS = frozenset({"1", "true", "ativo", "sim", "yes", "s"})
FALSY_TOKENS = frozenset({"0", "false", "inativo", "nao", "não", "no", "n"})

# Phone numbers are stored as 8-15 digits (E.164 without the country code)
PHONE_MIN_DIGITS = 8
PHONE_MAX_DIGITS = 15
CEP_DIGITS = 8
UF_LENGTH = 2

# All timestamps are anchored to Brasília time
BRT_OFFSET_HOURS = -3

DEFAULT_COUNTRY = "Brasil"

# Longest exponent decode_scientific expands (Excel shows 15 significant digits)
MAX_SCIENTIFIC_EXPONENT = 30

# Choice prefixes shorter than this are too ambiguous to canonicalise
MIN_CHOICE_PREFIX = 3

# Enumerations used by the entity schemas
TIPOS_ESTABELECIMENTO = (
    "Restaurante",
    "Bar",
    "Lancheria",
    "Churrascaria",
    "Petiscaria",
    "Pizzaria",
    "Outro",
)

UNIDADES_MEDIDA = (
    "Grama",
    "Quilograma",
    "Mililitro",
    "Litro",
    "Unidade",
    "Dúzia",
    "Caixa",
    "Pacote",
    "Fatia",
    "Xícara",
    "Colher de sopa",
    "Colher de chá",
)

TIPOS_TRANSACAO = ("Receita", "Despesa")

TIPO_TRANSACAO_ALIASES: dict[str, str] = {
    "entrada": "Receita",
    "credito": "Receita",
    "crédito": "Receita",
    "saida": "Despesa",
    "saída": "Despesa",
    "debito": "Despesa",
    "débito": "Despesa",
}

FINANCEIRO_CATEGORIAS = (
    "Vendas",
    "Serviços",
    "PIX",
    "Dinheiro",
    "Cartão de Crédito",
    "Cartão de Débito",
    "Aluguel",
    "Energia",
    "Água",
    "Internet",
    "Folha de Pagamento",
    "Impostos",
    "Marketing",
    "Manutenção",
    "Transporte",
    "Outros",
)

TIPOS_ENTREGA = ("Própria", "iFood", "Rappi", "UberEats", "Outro")
FORMAS_PAGAMENTO = ("PIX", "Cartão de Débito", "Cartão de Crédito", "Dinheiro", "Outro")
STATUS_ENTREGA = ("Pendente", "Saiu", "Entregue", "Cancelado")

TIPOS_COMUNICACAO = ("Promoção", "Fornecedor", "Outro")
DESTINATARIOS_TIPOS = (
    "TodosClientes",
    "ClientesEspecificos",
    "TodosFornecedores",
    "FornecedoresEspecificos",
    "Outros",
)
STATUS_COMUNICACAO = ("Pendente", "Enviado", "Cancelado")

TIPOS_CARDAPIO = ("Café", "Almoço", "Janta", "Lanche", "Bebida", "Outro")

TIPOS_PEDIDO = ("Atendente", "QR Code", "APP", "Outro")
STATUS_PEDIDO = ("Pendente", "Finalizado", "Cancelado")

# Header alias tables: external label -> canonical field key.
# Labels are matched case and diacritic insensitively, so only one
# spelling of each is needed here.
ADDRESS_ALIASES: dict[str, str] = {
    "cep": "cep",
    "codigo postal": "cep",
    "endereço": "endereco",
    "logradouro": "endereco",
    "cidade": "cidade",
    "municipio": "cidade",
    "uf": "uf",
    "estado": "uf",
    "país": "pais",
}

CONTACT_ALIASES: dict[str, str] = {
    "email": "email",
    "e-mail": "email",
    "ddi": "ddi",
    "codigo do pais": "ddi",
    "telefone": "telefone",
    "fone": "telefone",
    "celular": "telefone",
    "whatsapp": "telefone",
}

ESTABELECIMENTO_REF_ALIASES: dict[str, str] = {
    "estabelecimento": "estabelecimento_id",
    "estabelecimento nome": "estabelecimento_id",
    "nome estabelecimento": "estabelecimento_id",
    "nome do estabelecimento": "estabelecimento_id",
    "id estabelecimento": "estabelecimento_id",
    "id_estabelecimento": "estabelecimento_id",
    "estabelecimento_nome": "estabelecimento_id",
}

ESTABELECIMENTO_ALIASES: dict[str, str] = {
    "nome": "nome",
    "nome fantasia": "nome",
    "razão social": "razao_social",
    "cnpj": "cnpj",
    "tipo de estabelecimento": "tipo_estabelecimento",
    "tipo estabelecimento": "tipo_estabelecimento",
    "tipo": "tipo_estabelecimento",
    "ativo": "ativo",
    "status": "ativo",
    **CONTACT_ALIASES,
    **ADDRESS_ALIASES,
}

CLIENTE_ALIASES: dict[str, str] = {
    **ESTABELECIMENTO_REF_ALIASES,
    "nome": "nome",
    "cliente": "nome",
    "gênero": "genero",
    "sexo": "genero",
    "profissão": "profissao",
    "aceita promoção por email": "aceita_promocao_email",
    "aceita promoção email": "aceita_promocao_email",
    "aceita promoção": "aceita_promocao_email",
    "ativo": "ativo",
    "status": "ativo",
    **CONTACT_ALIASES,
    **ADDRESS_ALIASES,
}

FORNECEDOR_ALIASES: dict[str, str] = {
    "nome": "nome",
    "fornecedor": "nome",
    "razão social": "razao_social",
    "cnpj": "cnpj",
    "responsável": "nome_responsavel",
    "nome responsável": "nome_responsavel",
    "nome do responsável": "nome_responsavel",
    "ativo": "ativo",
    "status": "ativo",
    **CONTACT_ALIASES,
    **ADDRESS_ALIASES,
}

CATEGORIA_ALIASES: dict[str, str] = {
    "nome": "nome",
    "categoria": "nome",
    "descrição": "descricao",
    "ativo": "ativo",
    "status": "ativo",
}

ITEM_ALIASES: dict[str, str] = {
    "nome": "nome",
    "item": "nome",
    "categoria": "categoria_id",
    "categoria nome": "categoria_id",
    "categoria_nome": "categoria_id",
    "categoria id": "categoria_id",
    "preço": "preco",
    "preço venda": "preco",
    "preco_centavos": "preco",
    "custo": "custo_pago",
    "custo pago": "custo_pago",
    "custo_pago_centavos": "custo_pago",
    "unidade": "unidade_medida",
    "unidade medida": "unidade_medida",
    "unidade de medida": "unidade_medida",
    "peso": "peso_gramas",
    "peso gramas": "peso_gramas",
    "peso (g)": "peso_gramas",
    "estoque": "estoque_atual",
    "estoque atual": "estoque_atual",
    "ativo": "ativo",
    "status": "ativo",
}

FINANCEIRO_ALIASES: dict[str, str] = {
    **ESTABELECIMENTO_REF_ALIASES,
    "tipo": "tipo",
    "tipo de transação": "tipo",
    "categoria": "categoria",
    "valor": "valor",
    "valor (r$)": "valor",
    "data": "data_transacao",
    "data da transação": "data_transacao",
    "data transação": "data_transacao",
    "descrição": "descricao",
    "ativo": "ativo",
}

ENTREGA_ALIASES: dict[str, str] = {
    **ESTABELECIMENTO_REF_ALIASES,
    "tipo": "tipo_entrega",
    "tipo entrega": "tipo_entrega",
    "tipo de entrega": "tipo_entrega",
    "pedido": "codigo_pedido_app",
    "codigo pedido": "codigo_pedido_app",
    "código do pedido": "codigo_pedido_app",
    "pedido codigo": "codigo_pedido_app",
    "valor pedido": "valor_pedido",
    "valor do pedido": "valor_pedido",
    "taxa extra": "taxa_extra",
    "valor entrega": "valor_entrega",
    "valor da entrega": "valor_entrega",
    "forma de pagamento": "forma_pagamento",
    "pagamento": "forma_pagamento",
    "cliente": "cliente_nome",
    "cliente nome": "cliente_nome",
    "data/hora saída": "data_hora_saida",
    "data hora saida": "data_hora_saida",
    "saída": "data_hora_saida",
    "data/hora entregue": "data_hora_entregue",
    "data hora entregue": "data_hora_entregue",
    "entregue em": "data_hora_entregue",
    "observação": "observacao",
    "status": "status",
    **CONTACT_ALIASES,
    **ADDRESS_ALIASES,
}

COMUNICACAO_ALIASES: dict[str, str] = {
    **ESTABELECIMENTO_REF_ALIASES,
    "tipo": "tipo_comunicacao",
    "tipo comunicação": "tipo_comunicacao",
    "tipo de comunicação": "tipo_comunicacao",
    "assunto": "assunto",
    "mensagem": "mensagem",
    "destinatários": "destinatarios_tipo",
    "tipo destinatários": "destinatarios_tipo",
    "destinatários texto": "destinatarios_text",
    "status": "status",
}

CARDAPIO_ALIASES: dict[str, str] = {
    "nome": "nome",
    "cardápio": "nome",
    "tipo": "tipo_cardapio",
    "tipo de cardápio": "tipo_cardapio",
    "tipo cardápio": "tipo_cardapio",
    "quantidade total": "quantidade_total",
    "preço dos itens": "preco_itens_centavos",
    "preço itens": "preco_itens_centavos",
    "margem de lucro": "margem_lucro_percentual",
    "margem lucro": "margem_lucro_percentual",
    "margem": "margem_lucro_percentual",
    "preço total": "preco_total_centavos",
    "descrição": "descricao",
    "status": "ativo",
    "ativo": "ativo",
    "item": "item_id",
    "item nome": "item_id",
    "item_nome": "item_id",
    "item quantidade": "item_quantidade",
    "item valor unitário": "item_valor_unitario",
    "item valor": "item_valor_unitario",
}

PEDIDO_ALIASES: dict[str, str] = {
    **ESTABELECIMENTO_REF_ALIASES,
    "código": "codigo",
    "codigo pedido": "codigo",
    "pedido": "codigo",
    "tipo": "tipo_pedido",
    "tipo de pedido": "tipo_pedido",
    "tipo pedido": "tipo_pedido",
    "valor": "valor_total",
    "valor total": "valor_total",
    "valor_total_centavos": "valor_total",
    "total": "valor_total",
    "finalizado em": "data_hora_finalizado",
    "data/hora finalizado": "data_hora_finalizado",
    "data hora finalizado": "data_hora_finalizado",
    "observação": "observacao",
    "status": "status",
}
