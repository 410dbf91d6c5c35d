"""Static reference tables used by the normalizers and the payment engine.

Codes follow the national classifiers used on the ГТД form: ISO 3166 alpha-2
for countries, ISO 4217 for currencies, 2-digit procedure codes for regimes and
2-digit transport mode codes for graphs 25/26.
"""

# ISO numeric -> alpha-2. "000" means "unknown" on the form and maps to nothing.
NUMERIC_TO_ISO = {
    "860": "UZ", "398": "KZ", "643": "RU", "156": "CN", "792": "TR",
    "276": "DE", "840": "US", "417": "KG", "762": "TJ", "795": "TM",
    "004": "AF", "364": "IR", "356": "IN", "586": "PK", "804": "UA",
    "112": "BY", "031": "AZ", "268": "GE", "051": "AM", "498": "MD",
    "428": "LV", "440": "LT", "233": "EE", "616": "PL", "380": "IT",
    "250": "FR", "724": "ES", "826": "GB", "392": "JP", "410": "KR",
    "784": "AE", "682": "SA", "528": "NL", "056": "BE", "040": "AT",
    "756": "CH",
}

ISO_TO_NUMERIC = {iso: num for num, iso in NUMERIC_TO_ISO.items()}

# Lower-cased English and Russian country names -> alpha-2
COUNTRY_NAMES = {
    "uzbekistan": "UZ", "узбекистан": "UZ", "republic of uzbekistan": "UZ",
    "kazakhstan": "KZ", "казахстан": "KZ",
    "russia": "RU", "россия": "RU", "russian federation": "RU", "российская федерация": "RU",
    "china": "CN", "китай": "CN", "people's republic of china": "CN", "prc": "CN",
    "turkey": "TR", "turkiye": "TR", "турция": "TR",
    "germany": "DE", "германия": "DE",
    "usa": "US", "сша": "US", "united states": "US", "united states of america": "US",
    "kyrgyzstan": "KG", "кыргызстан": "KG", "киргизия": "KG",
    "tajikistan": "TJ", "таджикистан": "TJ",
    "turkmenistan": "TM", "туркменистан": "TM",
    "afghanistan": "AF", "афганистан": "AF",
    "iran": "IR", "иран": "IR",
    "india": "IN", "индия": "IN",
    "pakistan": "PK", "пакистан": "PK",
    "ukraine": "UA", "украина": "UA",
    "belarus": "BY", "беларусь": "BY",
    "azerbaijan": "AZ", "азербайджан": "AZ",
    "georgia": "GE", "грузия": "GE",
    "armenia": "AM", "армения": "AM",
    "moldova": "MD", "молдова": "MD",
    "latvia": "LV", "латвия": "LV",
    "lithuania": "LT", "литва": "LT",
    "estonia": "EE", "эстония": "EE",
    "poland": "PL", "польша": "PL",
    "italy": "IT", "италия": "IT",
    "france": "FR", "франция": "FR",
    "spain": "ES", "испания": "ES",
    "uk": "GB", "united kingdom": "GB", "great britain": "GB", "великобритания": "GB",
    "japan": "JP", "япония": "JP",
    "korea": "KR", "south korea": "KR", "republic of korea": "KR", "корея": "KR",
    "uae": "AE", "united arab emirates": "AE", "оаэ": "AE",
    "saudi arabia": "SA", "саудовская аравия": "SA",
    "netherlands": "NL", "нидерланды": "NL",
    "belgium": "BE", "бельгия": "BE",
    "austria": "AT", "австрия": "AT",
    "switzerland": "CH", "швейцария": "CH",
}

# Lower-cased currency names and symbols -> ISO 4217
CURRENCY_NAMES = {
    "dollar": "USD", "доллар": "USD", "us dollar": "USD", "$": "USD",
    "euro": "EUR", "евро": "EUR", "€": "EUR",
    "ruble": "RUB", "рубль": "RUB", "₽": "RUB",
    "sum": "UZS", "сум": "UZS", "som": "UZS",
    "yuan": "CNY", "юань": "CNY", "rmb": "CNY", "¥": "CNY",
    "yen": "JPY", "йена": "JPY",
    "pound": "GBP", "фунт": "GBP", "£": "GBP",
    "tenge": "KZT", "тенге": "KZT",
}

INCOTERMS = ("EXW", "FCA", "FAS", "FOB", "CFR", "CIF", "CPT", "CIP", "DAP", "DPU", "DDP")

# Graph 20 numeric codes, including the retired Incoterms 2000 terms
INCOTERMS_NUM_CODES = {
    "EXW": "11", "FCA": "12", "CPT": "13", "CIP": "14", "DAP": "14",
    "DPU": "15", "DDP": "17", "FAS": "21", "FOB": "22", "CFR": "31",
    "CIF": "32", "DAF": "41", "DES": "42", "DEQ": "43", "DDU": "44",
}

# Letter group -> whether delivery cost to the border is added to customs value
INCOTERMS_GROUPS = {
    "E": {"name": "Отгрузка", "add_transport_to_customs_value": True},
    "F": {"name": "Основная перевозка не оплачена", "add_transport_to_customs_value": True},
    "C": {"name": "Основная перевозка оплачена", "add_transport_to_customs_value": False},
    "D": {"name": "Прибытие", "add_transport_to_customs_value": False},
}

DECLARATION_TYPE_ABBREVIATIONS = {
    "ИМ": "IMPORT", "ИМПОРТ": "IMPORT",
    "ЭК": "EXPORT", "ЭКСПОРТ": "EXPORT",
    "ТР": "TRANSIT", "ТРАНЗИТ": "TRANSIT", "ТТ": "TRANSIT",
    "РИ": "IMPORT", "ВВ": "IMPORT", "ПВ": "IMPORT", "ТС": "IMPORT",
    "СТ": "IMPORT", "БТ": "IMPORT", "СС": "IMPORT", "СВХ": "IMPORT",
    "ОГ": "IMPORT", "УН": "IMPORT",
    "РЭ": "EXPORT", "ВЭ": "EXPORT", "ПЭ": "EXPORT",
}

DECLARATION_TYPE_CODES = {
    "10": "EXPORT", "11": "EXPORT", "12": "EXPORT", "61": "EXPORT",
    "40": "IMPORT", "41": "IMPORT", "42": "IMPORT", "51": "IMPORT",
    "70": "IMPORT", "71": "IMPORT", "72": "IMPORT", "73": "IMPORT",
    "74": "IMPORT", "75": "IMPORT", "76": "IMPORT",
    "80": "TRANSIT",
}

# Free-text keywords -> transport mode code, checked in order
TRANSPORT_MODE_KEYWORDS = (
    ("90", ("САМОХОД", "SELF-PROPELLED")),
    ("30", ("АВТО", "TRUCK", "ROAD", "AUTO")),
    ("20", ("ЖД", "Ж/Д", "RAIL", "ПОЕЗД", "TRAIN")),
    ("10", ("МОР", "SEA", "SHIP", "VESSEL")),
    ("40", ("AIR", "АВИА", "ВОЗДУШ", "САМОЛЁТ", "САМОЛЕТ")),
    ("50", ("ПОЧТ", "POST", "MAIL")),
    ("71", ("ТРУБОПРОВОД", "PIPELINE")),
    ("80", ("РЕЧ", "RIVER")),
)

TRANSPORT_MODE_CODES = {
    "10": "Морской транспорт",
    "20": "Железнодорожный транспорт",
    "30": "Автомобильный транспорт",
    "40": "Воздушный транспорт",
    "50": "Почтовое отправление",
    "71": "Трубопроводный транспорт",
    "80": "Речной транспорт",
    "90": "Транспортное средство, перемещающееся своим ходом",
}

DEFAULT_TRANSPORT_MODE = "30"

# HS chapter (first two digits) -> ad valorem import duty, percent
DUTY_RATES_BY_HS_GROUP = {
    "01": {"rate": 0, "description": "Живые животные"},
    "02": {"rate": 15, "description": "Мясо и пищевые мясные субпродукты"},
    "03": {"rate": 10, "description": "Рыба и ракообразные"},
    "04": {"rate": 15, "description": "Молочная продукция"},
    "07": {"rate": 15, "description": "Овощи"},
    "08": {"rate": 15, "description": "Фрукты и орехи"},
    "09": {"rate": 15, "description": "Кофе, чай, пряности"},
    "10": {"rate": 0, "description": "Злаки"},
    "15": {"rate": 10, "description": "Жиры и масла"},
    "17": {"rate": 30, "description": "Сахар и кондитерские изделия"},
    "20": {"rate": 20, "description": "Продукты переработки овощей и фруктов"},
    "21": {"rate": 20, "description": "Разные пищевые продукты"},
    "22": {"rate": 50, "description": "Алкогольные и безалкогольные напитки"},
    "24": {"rate": 30, "description": "Табак"},
    "27": {"rate": 0, "description": "Топливо минеральное, нефть"},
    "28": {"rate": 5, "description": "Продукты неорганической химии"},
    "29": {"rate": 5, "description": "Органические химические соединения"},
    "30": {"rate": 0, "description": "Фармацевтическая продукция"},
    "39": {"rate": 10, "description": "Пластмассы и изделия из них"},
    "40": {"rate": 10, "description": "Каучук, резина"},
    "44": {"rate": 15, "description": "Древесина и изделия из нее"},
    "48": {"rate": 15, "description": "Бумага и картон"},
    "50": {"rate": 0, "description": "Шелк"},
    "52": {"rate": 5, "description": "Хлопок"},
    "61": {"rate": 30, "description": "Одежда трикотажная"},
    "62": {"rate": 30, "description": "Одежда текстильная"},
    "64": {"rate": 30, "description": "Обувь"},
    "70": {"rate": 15, "description": "Стекло и изделия из него"},
    "72": {"rate": 5, "description": "Черные металлы"},
    "73": {"rate": 15, "description": "Изделия из черных металлов"},
    "84": {"rate": 0, "description": "Машины и оборудование"},
    "85": {"rate": 5, "description": "Электрические машины и оборудование"},
    "87": {"rate": 30, "description": "Средства наземного транспорта"},
    "90": {"rate": 0, "description": "Оптические и медицинские приборы"},
    "94": {"rate": 20, "description": "Мебель"},
    "95": {"rate": 20, "description": "Игрушки, спортивный инвентарь"},
}

# HS chapter -> excise, percent of customs value
EXCISE_RATES_BY_HS_GROUP = {
    "22": 30,
    "24": 40,
    "27": 10,
}

PREFERENCE_CODES = {
    "000": "Без преференций",
    "100": "Тарифная преференция",
    "200": "Освобождение от пошлины",
    "300": "Освобождение от НДС",
    "400": "Освобождение от акциза",
    "500": "Свободная экономическая зона",
    "600": "Инвестиционная преференция",
}

# Origin country -> preference code (free-trade partners)
PREFERENTIAL_COUNTRIES = {
    "RU": "200", "KZ": "200", "KG": "200", "TJ": "200",
    "BY": "200", "AZ": "200", "AM": "200", "MD": "200",
    "UA": "100", "TR": "100", "GE": "100",
}

DEFAULT_PREFERENCE_CODE = "000"

# Fallback rates to the national currency when no rate service answers
FALLBACK_EXCHANGE_RATES = {
    "USD": 12_500.0,
    "EUR": 13_500.0,
    "RUB": 140.0,
    "CNY": 1_750.0,
    "GBP": 15_800.0,
    "JPY": 85.0,
    "KZT": 28.0,
}

NATIONAL_CURRENCY = "UZS"
HOME_COUNTRY = "UZ"
