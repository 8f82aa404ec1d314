# panel_ventas/modules/ventas/definition.py
from panel_ventas.modules.tables import TableDefinition

VENTAS_TABLE = TableDefinition(
    entity="ventas",
    feature="ventasTable",
    title="Registro de Ventas",
    base_columns=(
        ("id", "ID"),
        ("nombre", "Nombre"),
        ("apellido", "Apellido"),
        ("email", "Email"),
        ("telefono", "Teléfono"),
        ("asesor", "Asesor"),
        ("fecha_venta", "Fecha de venta"),
        ("cliente", "Cliente"),
    ),
    search_fields=("nombre", "apellido", "email", "asesor", "cliente"),
    fields_path="/api/clientes/{cliente_id}/campos",
    rows_path="/api/ventas",
    rows_params=(("cliente", "{cliente_id}"),),
    default_sort="fecha_venta",
    default_order="desc",
    per_page_options=(5, 10, 20, 50),
    default_per_page=10,
    # Propiedades del registro de venta que no son columnas pero tampoco
    # pueden reutilizarse como campo personalizado
    extra_reserved=("cliente_nombre", "tiene_archivos", "campos_adicionales", "created_at", "updated_at"),
    server_export_paths=("/api/exportar-excel",),
    server_export_params=(("cliente", "{cliente_id}"),),
    download_export_paths=("/api/ventas/exportar", "/api/exportar-excel"),
    download_export_params=(("cliente", "{cliente_id}"),),
)
