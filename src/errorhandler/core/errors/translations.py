"""Localized error messages and the normalized errors they map to.

Two tables feed the normalizer:

- EXACT_TRANSLATIONS: full localized message -> ExactTranslation. Looked up
  verbatim, so entries must match the remote service's text exactly.
- PARTIAL_MATCH_RULES: regex rules tried in order; the first match wins.
  Specific rules must come before generic ones that would shadow them
  (for instance the e-mail flavour of "Invalid argument: ..." before the
  generic one).

Both tables are data and append-only. They are built once at import and
never mutated.
"""

from __future__ import annotations

import re
from types import MappingProxyType

from .codes import NormalizedError
from .models import ExactTranslation, PartialMatchRule

_N = NormalizedError

_EXACT_MESSAGES: dict[NormalizedError, dict[str, str]] = {
    _N.CONDITIONAL_RULE_REFERENCE_DIF_SHEET: {
        "en": "Conditional format rule cannot reference a different sheet.",
        "fr": "Une règle de mise en forme conditionnelle ne peut pas faire référence à une autre feuille.",
        "es": "Una regla de formato condicional no puede hacer referencia a una hoja diferente.",
        "de": "Eine Regel für bedingte Formatierung kann nicht auf ein anderes Tabellenblatt verweisen.",
        "it": "Una regola di formattazione condizionale non può fare riferimento a un foglio diverso.",
        "pt": "A regra de formatação condicional não pode fazer referência a uma página diferente.",
    },
    _N.TRYING_TO_EDIT_PROTECTED_CELL: {
        "en": "You are trying to edit a protected cell or object. Please contact the spreadsheet "
              "owner to remove protection if you need to edit.",
        "fr": "Vous tentez de modifier une cellule ou un objet protégés. Si vous devez effectuer "
              "cette modification, demandez au propriétaire de la feuille de calcul de supprimer "
              "la protection.",
        "es": "Estás intentando editar una celda o un objeto protegidos. Ponte en contacto con el "
              "propietario de la hoja de cálculo para que elimine la protección si necesitas "
              "editarlos.",
        "de": "Sie versuchen, eine geschützte Zelle oder ein geschütztes Objekt zu bearbeiten. "
              "Bitten Sie den Inhaber der Tabelle, den Schutz aufzuheben, wenn Sie Änderungen "
              "vornehmen müssen.",
        "it": "Stai tentando di modificare una cella o un oggetto protetto. Se devi apportare "
              "modifiche, contatta il proprietario del foglio di lavoro per rimuovere la protezione.",
        "pt": "Você está tentando editar uma célula ou um objeto protegido. Entre em contato com o "
              "proprietário da planilha para remover a proteção se precisar editá-lo.",
    },
    _N.SHEET_ALREADY_EXISTS_PLEASE_ENTER_ANOTHER_NAME: {
        "en": "A sheet with this name already exists. Please enter another name.",
        "fr": "Il existe déjà une feuille nommée ainsi. Veuillez indiquer un autre nom.",
        "es": "Ya existe una hoja con este nombre. Introduce otro nombre.",
        "de": "Es ist bereits ein Tabellenblatt mit diesem Namen vorhanden. Geben Sie einen anderen "
              "Namen ein.",
        "it": "Esiste già un foglio con questo nome. Inserisci un altro nome.",
        "pt": "Já existe uma página com este nome. Insira outro nome.",
    },
    _N.RANGE_COORDINATES_INVALID: {
        "en": "The coordinates or dimensions of the range are invalid.",
        "fr": "Les coordonnées ou les dimensions de la plage ne sont pas valides.",
        "es": "Las coordenadas o las dimensiones del intervalo no son válidas.",
        "de": "Die Koordinaten oder Abmessungen des Bereichs sind ungültig.",
    },
    _N.RANGE_NOT_FOUND: {
        "en": "Range not found",
        "fr": "Plage introuvable",
        "es": "No se ha encontrado el intervalo",
        "de": "Bereich nicht gefunden",
    },
    _N.NO_ITEM_WITH_GIVEN_ID: {
        "en": "No item with the given ID could be found, or you do not have permission to access it.",
        "fr": "Impossible de trouver l'élément correspondant à cet identifiant, ou vous n'êtes pas "
              "autorisé à y accéder.",
        "es": "No se ha encontrado ningún elemento con el ID proporcionado o no tienes permiso "
              "para acceder a él.",
        "de": "Es wurde kein Element mit der angegebenen ID gefunden oder Sie haben keine "
              "Zugriffsberechtigung.",
    },
    _N.ACCESS_DENIED_DRIVEAPP: {
        "en": "Access denied: DriveApp.",
        "fr": "Accès refusé : DriveApp.",
        "es": "Acceso denegado: DriveApp.",
        "de": "Zugriff verweigert: DriveApp.",
        "it": "Accesso negato: DriveApp.",
        "pt": "Acesso negado: DriveApp.",
    },
    _N.SERVICE_INVOKED_TOO_MANY_TIMES_EMAIL: {
        "en": "Service invoked too many times for one day: email.",
        "fr": "Service appelé trop de fois pour une journée : email.",
        "es": "Se ha invocado el servicio demasiadas veces en un día: email.",
        "de": "Dienst wurde für einen Tag zu oft aufgerufen: email.",
        "it": "Servizio richiamato troppe volte in un giorno: email.",
        "pt": "Serviço invocado muitas vezes em um dia: email.",
    },
    _N.LIMIT_EXCEEDED_MAX_RECIPIENTS_PER_MESSAGE: {
        "en": "Limit Exceeded: Email Recipients Per Message.",
        "fr": "Limite dépassée : Destinataires de l'e-mail par message.",
        "es": "Límite superado: Destinatarios de correo electrónico por mensaje.",
        "de": "Limit überschritten: E-Mail-Empfänger pro Nachricht.",
    },
    _N.LIMIT_EXCEEDED_EMAIL_BODY_SIZE: {
        "en": "Limit Exceeded: Email Body Size.",
        "fr": "Limite dépassée : Taille du corps de l'e-mail.",
        "es": "Límite superado: Tamaño del cuerpo del correo electrónico.",
        "de": "Limit überschritten: Größe des E-Mail-Texts.",
    },
    _N.LIMIT_EXCEEDED_EMAIL_TOTAL_ATTACHMENTS_SIZE: {
        "en": "Limit Exceeded: Email Total Attachments Size.",
        "fr": "Limite dépassée : Taille totale des pièces jointes de l'e-mail.",
        "es": "Límite superado: Tamaño total de los archivos adjuntos del correo electrónico.",
        "de": "Limit überschritten: Gesamtgröße der E-Mail-Anhänge.",
    },
    _N.MAIL_SERVICE_NOT_ENABLED: {
        "en": "Mail service not enabled",
        "fr": "Service de messagerie non activé",
        "es": "El servicio de correo no está habilitado",
        "de": "E-Mail-Dienst nicht aktiviert",
        "it": "Servizio di posta non attivato",
        "pt": "Serviço de e-mail não ativado",
    },
    _N.GMAIL_OPERATION_NOT_ALLOWED: {
        "en": "Gmail operation not allowed.",
        "fr": "Opération Gmail non autorisée.",
        "es": "Operación de Gmail no permitida.",
        "de": "Gmail-Vorgang nicht zulässig.",
    },
    _N.USER_RATE_LIMIT_EXCEEDED: {
        "en": "User Rate Limit Exceeded",
    },
    _N.RATE_LIMIT_EXCEEDED: {
        "en": "Rate Limit Exceeded",
    },
    _N.DAILY_LIMIT_EXCEEDED: {
        "en": "Daily Limit Exceeded",
    },
    _N.SERVER_ERROR_RETRY_LATER: {
        "en": "We're sorry, a server error occurred. Please wait a bit and try again.",
        "fr": "Une erreur liée au serveur s'est produite. Nous vous prions de nous en excuser. "
              "Veuillez patienter un peu, puis réessayer.",
        "es": "Lo sentimos, se ha producido un error en el servidor. Espera un momento y vuelve "
              "a intentarlo.",
        "de": "Leider ist ein Serverfehler aufgetreten. Warten Sie einen Moment und versuchen "
              "Sie es dann noch einmal.",
        "it": "Spiacenti, si è verificato un errore del server. Attendi qualche istante e riprova.",
        "pt": "Lamentamos, ocorreu um erro no servidor. Aguarde um momento e tente novamente.",
    },
    _N.SERVER_ERROR_PLEASE_TRY_AGAIN: {
        "en": "Server error. Please try again.",
        "fr": "Erreur de serveur. Veuillez réessayer.",
        "es": "Error del servidor. Vuelve a intentarlo.",
        "de": "Serverfehler. Bitte versuchen Sie es erneut.",
        "it": "Errore del server. Riprova.",
        "pt": "Erro do servidor. Tente novamente.",
    },
    _N.AN_INTERNAL_ERROR_HAS_OCCURRED: {
        "en": "An internal error has occurred",
        "fr": "Une erreur interne s'est produite.",
        "es": "Se ha producido un error interno.",
        "de": "Ein interner Fehler ist aufgetreten.",
        "it": "Si è verificato un errore interno.",
        "pt": "Ocorreu um erro interno.",
    },
    _N.INTERNAL_ERROR_ENCOUNTERED: {
        "en": "Internal error encountered.",
    },
    _N.BACKEND_ERROR: {
        "en": "Backend Error",
    },
    _N.SERVICE_ERROR: {
        "en": "Service error",
        "fr": "Erreur de service",
        "es": "Error del servicio",
        "de": "Dienstfehler",
    },
    _N.SERVICE_UNAVAILABLE: {
        "en": "Service unavailable. Try again later.",
        "fr": "Service indisponible. Réessayez plus tard.",
        "es": "Servicio no disponible. Inténtalo de nuevo más tarde.",
        "de": "Dienst nicht verfügbar. Versuchen Sie es später noch einmal.",
    },
    _N.EMPTY_RESPONSE: {
        "en": "Empty response",
        "fr": "Réponse vide",
        "es": "Respuesta vacía",
        "de": "Leere Antwort",
    },
    _N.ADDRESS_UNAVAILABLE: {
        "en": "Address unavailable",
        "fr": "Adresse non disponible",
        "es": "Dirección no disponible",
        "de": "Adresse nicht verfügbar",
    },
    _N.NOT_FOUND: {
        "en": "Not Found",
        "fr": "Introuvable",
        "es": "No encontrado",
        "de": "Nicht gefunden",
        "it": "Non trovato",
        "pt": "Não encontrado",
    },
    _N.AUTHORIZATION_REQUIRED: {
        "en": "Authorization is required to perform that action.",
        "fr": "Une autorisation est requise pour effectuer cette action.",
        "es": "Se necesita autorización para realizar esta acción.",
        "de": "Für diese Aktion ist eine Autorisierung erforderlich.",
        "it": "Per eseguire questa azione è necessaria l'autorizzazione.",
        "pt": "É necessária autorização para executar esta ação.",
    },
    _N.ACCESS_DENIED_SECURITY_POLICY: {
        "en": "Access denied by a security policy established by the administrator of your "
              "organization. Please contact your administrator for further assistance.",
        "fr": "Accès refusé par une règle de sécurité définie par l'administrateur de votre "
              "organisation. Pour obtenir de l'aide, veuillez contacter votre administrateur.",
        "es": "Acceso denegado por una política de seguridad establecida por el administrador "
              "de tu organización. Ponte en contacto con tu administrador para obtener ayuda.",
        "de": "Der Zugriff wurde durch eine Sicherheitsrichtlinie des Administrators Ihrer "
              "Organisation verweigert. Wenden Sie sich an Ihren Administrator, wenn Sie Hilfe "
              "benötigen.",
    },
    _N.INSUFFICIENT_PERMISSION: {
        "en": "Insufficient Permission",
    },
    _N.INVALID_CREDENTIALS: {
        "en": "Invalid Credentials",
    },
    _N.LOGIN_REQUIRED: {
        "en": "Login Required",
    },
    _N.ACTION_NOT_ALLOWED: {
        "en": "Action not allowed",
        "fr": "Action non autorisée",
        "es": "Acción no permitida",
        "de": "Aktion nicht zulässig",
        "it": "Azione non consentita",
        "pt": "Ação não permitida",
    },
    _N.INVALID_REQUESTS: {
        "en": "Invalid requests",
    },
    _N.BAD_VALUE: {
        "en": "Bad value",
        "fr": "Valeur incorrecte",
        "es": "Valor incorrecto",
        "de": "Ungültiger Wert",
        "it": "Valore non valido",
        "pt": "Valor inválido",
    },
}

# (pattern, variable names, error, locale), in evaluation order.
_PARTIAL_RULES: list[tuple[str, tuple[str, ...], NormalizedError, str]] = [
    # Documents
    (r"^Document (\S*) is missing \(perhaps it was deleted, or you don't have read access\?\)$",
     ("document_id",), _N.DOCUMENT_MISSING, "en"),
    (r"^Le document (\S*) est manquant \(peut-être a-t-il été supprimé, ou vous n'y avez pas "
     r"accès en lecture \?\)$",
     ("document_id",), _N.DOCUMENT_MISSING, "fr"),
    (r"^Falta el documento (\S*) \(puede que se haya eliminado o que no tengas acceso de "
     r"lectura\)\.?$",
     ("document_id",), _N.DOCUMENT_MISSING, "es"),
    (r"^Dokument (\S*) fehlt \(wurde es möglicherweise gelöscht oder haben Sie keinen "
     r"Lesezugriff\?\)$",
     ("document_id",), _N.DOCUMENT_MISSING, "de"),

    # Rate limits with an explicit resume time
    (r"^User-rate limit exceeded\.\s+Retry after (.*Z)",
     ("timestamp",), _N.USER_RATE_LIMIT_EXCEEDED_RETRY_AFTER_SPECIFIED_TIME, "en"),

    # Quotas
    (r"^Service invoked too many times for one day: ([^.]+)\.?$",
     ("service",), _N.SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY, "en"),
    (r"^Service appelé trop de fois pour une journée : ([^.]+)\.?$",
     ("service",), _N.SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY, "fr"),
    (r"^Se ha invocado el servicio demasiadas veces en un día: ([^.]+)\.?$",
     ("service",), _N.SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY, "es"),
    (r"^Dienst wurde für einen Tag zu oft aufgerufen: ([^.]+)\.?$",
     ("service",), _N.SERVICE_INVOKED_TOO_MANY_TIMES_FOR_ONE_DAY, "de"),
    (r"^Too many simultaneous invocations: (.+)$",
     ("service",), _N.TOO_MANY_SIMULTANEOUS_INVOCATIONS, "en"),
    (r"^Trop d'appels simultanés : (.+)$",
     ("service",), _N.TOO_MANY_SIMULTANEOUS_INVOCATIONS, "fr"),

    # Service / transport
    (r"^Service error:(?: (.*))?$",
     ("service",), _N.SERVICE_ERROR, "en"),
    (r"^Erreur de service :(?: (.*))?$",
     ("service",), _N.SERVICE_ERROR, "fr"),
    (r"^Address unavailable: (.*)$",
     ("url",), _N.ADDRESS_UNAVAILABLE, "en"),
    (r"^Adresse non disponible : (.*)$",
     ("url",), _N.ADDRESS_UNAVAILABLE, "fr"),
    (r"^Timeout: (.*)$",
     ("url",), _N.URL_FETCH_TIMEOUT, "en"),
    (r"^Délai d'attente dépassé : (.*)$",
     ("url",), _N.URL_FETCH_TIMEOUT, "fr"),

    # Permissions
    (r"^You do not have permission to call (\S+?)\.?(?:\s|$)",
     ("method",), _N.NO_PERMISSION_TO_CALL, "en"),
    (r"^Vous n'êtes pas autorisé à appeler (\S+?)\.?(?:\s|$)",
     ("method",), _N.NO_PERMISSION_TO_CALL, "fr"),
    (r"^No tienes permiso para llamar a (\S+?)\.?(?:\s|$)",
     ("method",), _N.NO_PERMISSION_TO_CALL, "es"),

    # Request validation
    (r"^Invalid requests\[(\d+)\]\.(\w+): (.*)$",
     ("request_index", "request_type", "detail"), _N.INVALID_REQUESTS, "en"),
    (r"^Invalid email: (.*)$",
     ("email",), _N.INVALID_EMAIL, "en"),
    (r"^Adresse e-mail non valide : (.*)$",
     ("email",), _N.INVALID_EMAIL, "fr"),
    (r"^Correo electrónico no válido: (.*)$",
     ("email",), _N.INVALID_EMAIL, "es"),
    # Must precede the generic invalid-argument rules, which would shadow it.
    (r"^Invalid argument: ([^\s@]*@\S*)$",
     ("email",), _N.INVALID_EMAIL, "en"),
    (r"^Argument non valide : ([^\s@]*@\S*)$",
     ("email",), _N.INVALID_EMAIL, "fr"),
    (r"^Invalid argument: (.*)$",
     ("value",), _N.INVALID_ARGUMENT, "en"),
    (r"^Argument non valide : (.*)$",
     ("value",), _N.INVALID_ARGUMENT, "fr"),
    (r"^Argumento no válido: (.*)$",
     ("value",), _N.INVALID_ARGUMENT, "es"),
    (r"^Ungültiges Argument: (.*)$",
     ("value",), _N.INVALID_ARGUMENT, "de"),
    (r"^Argomento non valido: (.*)$",
     ("value",), _N.INVALID_ARGUMENT, "it"),
    (r"^Argumento inválido: (.*)$",
     ("value",), _N.INVALID_ARGUMENT, "pt"),
]


def _build_exact_translations() -> dict[str, ExactTranslation]:
    table: dict[str, ExactTranslation] = {}
    for error, by_locale in _EXACT_MESSAGES.items():
        for locale, message in by_locale.items():
            if message in table:
                raise ValueError(f"duplicate localized message: {message!r}")
            table[message] = ExactTranslation(message=message, error=error, locale=locale)
    return table


EXACT_TRANSLATIONS: MappingProxyType[str, ExactTranslation] = MappingProxyType(
    _build_exact_translations()
)

PARTIAL_MATCH_RULES: tuple[PartialMatchRule, ...] = tuple(
    PartialMatchRule(
        pattern=re.compile(pattern),
        variables=variables,
        error=error,
        locale=locale,
    )
    for pattern, variables, error, locale in _PARTIAL_RULES
)

del _N
