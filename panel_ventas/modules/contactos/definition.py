# panel_ventas/modules/contactos/definition.py
from panel_ventas.modules.tables import TableDefinition

ESTADOS_CONTACTO = (
    "no contactado",
    "contactado",
    "interesado",
    "seguimiento",
    "propuesta",
    "negociacion",
    "ganado",
    "perdido",
    "descartado",
)

CONTACTOS_TABLE = TableDefinition(
    entity="contactos",
    feature="contactsTable",
    title="Contactos",
    base_columns=(
        ("id", "ID"),
        ("nombre", "Nombre"),
        ("apellido", "Apellido"),
        ("correo", "Email"),
        ("telefono", "Teléfono"),
        ("telefono_whatsapp", "WhatsApp"),
        ("estado", "Estado"),
        ("programa_interes", "Programa"),
        ("utm_source", "UTM Source"),
        ("utm_campaign", "UTM Campaign"),
        ("fecha_insercion", "Fecha Creación"),
        ("updated_at", "Última Actualización"),
    ),
    search_fields=("nombre", "apellido", "correo", "telefono", "programa_interes"),
    fields_path="/api/clientes/{cliente_id}/contact-fields",
    rows_path="/api/clientes/{cliente_id}/contactos",
    default_sort="updated_at",
    default_order="desc",
    per_page_options=(25, 50, 100),
    default_per_page=50,
    extra_reserved=(
        "email", "asesor", "cliente", "created_by", "assigned_to",
        "utm_medio", "utm_content", "campos_adicionales",
    ),
    equals_filters=("estado",),
    download_export_paths=("/api/contacts/client/{cliente_id}/export",),
    download_export_query=("search", "estado", "format"),
)
