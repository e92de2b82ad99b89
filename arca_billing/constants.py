from enum import IntEnum


class TipoComprobante(IntEnum):
    FACTURA_A = 1
    NOTA_DEBITO_A = 2
    NOTA_CREDITO_A = 3
    FACTURA_B = 6
    NOTA_DEBITO_B = 7
    NOTA_CREDITO_B = 8
    FACTURA_C = 11
    NOTA_DEBITO_C = 12
    NOTA_CREDITO_C = 13
    FACTURA_E = 19
    NOTA_DEBITO_E = 20
    NOTA_CREDITO_E = 21
    FACTURA_M = 51
    NOTA_DEBITO_M = 52
    NOTA_CREDITO_M = 53


class Concepto(IntEnum):
    PRODUCTOS = 1
    SERVICIOS = 2
    PRODUCTOS_Y_SERVICIOS = 3


class TipoDocumento(IntEnum):
    CUIT = 80
    CUIL = 86
    CDI = 87
    LE = 89
    LC = 90
    CI_EXTRANJERA = 91
    EN_TRAMITE = 92
    ACTA_NACIMIENTO = 93
    PASAPORTE = 94
    CI_BS_AS_RNP = 95
    DNI = 96
    CONSUMIDOR_FINAL = 99
    CI_POLICIA_FEDERAL = 0


class Alicuota(IntEnum):
    IVA_0 = 3
    IVA_10_5 = 4
    IVA_21 = 5
    IVA_27 = 6
    IVA_5 = 8
    IVA_2_5 = 9


class CondicionIVA(IntEnum):
    RESPONSABLE_INSCRIPTO = 1
    EXENTO = 4
    CONSUMIDOR_FINAL = 5
    MONOTRIBUTO = 6
    NO_CATEGORIZADO = 7
    PROVEEDOR_EXTERIOR = 8
    CLIENTE_EXTERIOR = 9
    IVA_LIBERADO = 10
    RESPONSABLE_INSCRIPTO_PERCEPCION = 11
    MONOTRIBUTISTA_SOCIAL = 13
    NO_ALCANZADO = 15


# Alícuota con la que ARCA espera que se informe una operación exenta.
# Si ARCA cambia su catálogo de alícuotas, hay que revisar este valor.
ALICUOTA_EXENTA = Alicuota.IVA_0

# Tipos de Comprobante
TIPOS_COMPROBANTE = {
    1: 'Factura A',
    2: 'Nota de Débito A',
    3: 'Nota de Crédito A',
    6: 'Factura B',
    7: 'Nota de Débito B',
    8: 'Nota de Crédito B',
    11: 'Factura C',
    12: 'Nota de Débito C',
    13: 'Nota de Crédito C',
    19: 'Factura E',
    20: 'Nota de Débito E',
    21: 'Nota de Crédito E',
    51: 'Factura M',
    52: 'Nota de Débito M',
    53: 'Nota de Crédito M',
}

# Letra de cada tipo de comprobante
LETRAS_COMPROBANTE = {
    TipoComprobante.FACTURA_A: 'A',
    TipoComprobante.NOTA_DEBITO_A: 'A',
    TipoComprobante.NOTA_CREDITO_A: 'A',
    TipoComprobante.FACTURA_B: 'B',
    TipoComprobante.NOTA_DEBITO_B: 'B',
    TipoComprobante.NOTA_CREDITO_B: 'B',
    TipoComprobante.FACTURA_C: 'C',
    TipoComprobante.NOTA_DEBITO_C: 'C',
    TipoComprobante.NOTA_CREDITO_C: 'C',
    TipoComprobante.FACTURA_E: 'E',
    TipoComprobante.NOTA_DEBITO_E: 'E',
    TipoComprobante.NOTA_CREDITO_E: 'E',
    TipoComprobante.FACTURA_M: 'M',
    TipoComprobante.NOTA_DEBITO_M: 'M',
    TipoComprobante.NOTA_CREDITO_M: 'M',
}

NOTAS_CREDITO = frozenset({
    TipoComprobante.NOTA_CREDITO_A,
    TipoComprobante.NOTA_CREDITO_B,
    TipoComprobante.NOTA_CREDITO_C,
    TipoComprobante.NOTA_CREDITO_E,
    TipoComprobante.NOTA_CREDITO_M,
})

NOTAS_DEBITO = frozenset({
    TipoComprobante.NOTA_DEBITO_A,
    TipoComprobante.NOTA_DEBITO_B,
    TipoComprobante.NOTA_DEBITO_C,
    TipoComprobante.NOTA_DEBITO_E,
    TipoComprobante.NOTA_DEBITO_M,
})

# Condiciones IVA del receptor admitidas por letra. None = sin restricción.
COMBINACIONES_PERMITIDAS = {
    'A': frozenset({
        CondicionIVA.RESPONSABLE_INSCRIPTO,
        CondicionIVA.RESPONSABLE_INSCRIPTO_PERCEPCION,
    }),
    'M': frozenset({
        CondicionIVA.RESPONSABLE_INSCRIPTO,
        CondicionIVA.RESPONSABLE_INSCRIPTO_PERCEPCION,
    }),
    'B': frozenset(CondicionIVA) - {
        CondicionIVA.RESPONSABLE_INSCRIPTO,
        CondicionIVA.RESPONSABLE_INSCRIPTO_PERCEPCION,
    },
    'C': None,
    'E': None,
}

# Tipos de Concepto
TIPOS_CONCEPTO = {
    1: 'Productos',
    2: 'Servicios',
    3: 'Productos y Servicios',
}

# Tipos de Documento
TIPOS_DOCUMENTO = {
    80: 'CUIT',
    86: 'CUIL',
    87: 'CDI',
    89: 'LE',
    90: 'LC',
    91: 'CI Extranjera',
    92: 'en trámite',
    93: 'Acta Nacimiento',
    94: 'Pasaporte',
    95: 'CI Bs. As. RNP',
    96: 'DNI',
    99: 'Doc. (Otro)',
    0: 'CI Policía Federal',
}

# Documentos que se validan con dígito verificador módulo 11
DOCUMENTOS_CON_CUIT = frozenset({TipoDocumento.CUIT, TipoDocumento.CUIL})

# Alícuotas de IVA
ALICUOTAS_IVA = {
    3: {'porcentaje': 0, 'descripcion': '0%'},
    4: {'porcentaje': 10.5, 'descripcion': '10.5%'},
    5: {'porcentaje': 21, 'descripcion': '21%'},
    6: {'porcentaje': 27, 'descripcion': '27%'},
    8: {'porcentaje': 5, 'descripcion': '5%'},
    9: {'porcentaje': 2.5, 'descripcion': '2.5%'},
}

# Condiciones de IVA
CONDICIONES_IVA = {
    1: 'IVA Responsable Inscripto',
    4: 'IVA Sujeto Exento',
    5: 'Consumidor Final',
    6: 'Responsable Monotributo',
    7: 'Sujeto No Categorizado',
    8: 'Proveedor del Exterior',
    9: 'Cliente del Exterior',
    10: 'IVA Liberado – Ley Nº 19.640',
    11: 'IVA Responsable Inscripto – Agente de Percepción',
    13: 'Monotributista Social',
    15: 'IVA No Alcanzado',
}

# Monedas
MONEDAS = {
    'PES': {'codigo': 'PES', 'descripcion': 'Pesos Argentinos'},
    'DOL': {'codigo': 'DOL', 'descripcion': 'Dólar Estadounidense'},
    '012': {'codigo': '012', 'descripcion': 'Real'},
    '014': {'codigo': '014', 'descripcion': 'Corona Danesa'},
    '019': {'codigo': '019', 'descripcion': 'Yenes'},
    '021': {'codigo': '021', 'descripcion': 'Libra Esterlina'},
    '060': {'codigo': '060', 'descripcion': 'Euro'},
}

# Tributos adicionales al IVA
TIPOS_TRIBUTO = {
    1: 'Impuestos nacionales',
    2: 'Impuestos provinciales',
    3: 'Impuestos municipales',
    4: 'Impuestos internos',
    5: 'Percepción de Ingresos Brutos',
    6: 'Percepción de IVA',
    7: 'Otras percepciones',
    99: 'Otros',
}

PUNTO_VENTA_MIN = 1
PUNTO_VENTA_MAX = 9999

# ARCA admite fechas de emisión hasta N días antes o después de hoy
DIAS_VENTANA_FECHA = 10

# Tolerancia de redondeo al comparar importes
TOLERANCIA_IMPORTES = 0.01

# CUIT de homologación publicado por ARCA
CUIT_PRUEBA = '20409378472'
