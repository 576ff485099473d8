"""
Permissions and Roles Configuration
This config defines the permission catalog for every workshop module and the system roles.
Used by the seed script, by the permission key parser and by the /auth/me endpoint.
"""

# Permission categories, in display order
CATEGORIES = ["general", "operations", "financial", "reports", "administration"]

# Define modules and their actions. display_order is the order of the first action;
# following actions are numbered consecutively.
MODULES = {
    "dashboard": {
        "category": "general",
        "display_order": 1,
        "actions": ["view"],
        "description": "Dashboard and statistics"
    },
    "customers": {
        "category": "operations",
        "display_order": 10,
        "actions": ["view", "create", "update", "delete", "export"],
        "description": "Customer records"
    },
    "vehicles": {
        "category": "operations",
        "display_order": 20,
        "actions": ["view", "create", "update", "delete"],
        "description": "Customer vehicles"
    },
    "work_orders": {
        "category": "operations",
        "display_order": 30,
        "actions": ["view", "create", "update", "delete", "cancel", "complete", "export"],
        "description": "Work orders"
    },
    "invoices": {
        "category": "financial",
        "display_order": 40,
        "actions": ["view", "create", "update", "delete", "print", "export", "void"],
        "description": "Invoices"
    },
    "inventory": {
        "category": "operations",
        "display_order": 50,
        "actions": ["view", "create", "update", "delete", "adjust_stock", "export"],
        "description": "Spare parts inventory"
    },
    "expenses": {
        "category": "financial",
        "display_order": 60,
        "actions": ["view", "create", "update", "delete", "approve", "export"],
        "description": "Workshop expenses"
    },
    "salaries": {
        "category": "financial",
        "display_order": 70,
        "actions": ["view", "create", "update", "delete", "approve", "export"],
        "description": "Technician salaries"
    },
    "technicians": {
        "category": "operations",
        "display_order": 80,
        "actions": ["view", "create", "update", "delete", "view_performance", "manage_assignments"],
        "description": "Technicians"
    },
    "reports": {
        "category": "reports",
        "display_order": 90,
        "actions": ["view", "export", "financial", "operations", "performance"],
        "description": "Reports"
    },
    "settings": {
        "category": "administration",
        "display_order": 100,
        "actions": ["view", "update", "manage_workshop", "manage_tax"],
        "description": "Workshop settings"
    },
    "users": {
        "category": "administration",
        "display_order": 110,
        "actions": ["view", "create", "update", "delete", "manage_roles", "manage_permissions", "change_password"],
        "description": "User accounts"
    },
    "roles": {
        "category": "administration",
        "display_order": 120,
        "actions": ["view", "create", "update", "delete", "manage_permissions"],
        "description": "Roles and role permissions"
    },
    "audit_logs": {
        "category": "administration",
        "display_order": 130,
        "actions": ["view"],
        "description": "RBAC audit log"
    },
}

# Descriptions for actions that are not plain CRUD
MODULE_SPECIFIC_PERMISSIONS = {
    "work_orders": {
        "cancel": "Cancel work orders",
        "complete": "Mark work orders as complete"
    },
    "invoices": {
        "print": "Print invoices",
        "void": "Void invoices"
    },
    "inventory": {
        "adjust_stock": "Adjust stock quantities"
    },
    "expenses": {
        "approve": "Approve expenses"
    },
    "salaries": {
        "approve": "Approve salaries"
    },
    "technicians": {
        "view_performance": "View technician performance reports",
        "manage_assignments": "Assign technicians to tasks"
    },
    "reports": {
        "financial": "View financial reports",
        "operations": "View operations reports",
        "performance": "View performance reports"
    },
    "settings": {
        "manage_workshop": "Manage basic workshop data",
        "manage_tax": "Manage tax settings"
    },
    "users": {
        "manage_roles": "Assign roles to users",
        "manage_permissions": "Manage per-user permission overrides",
        "change_password": "Change user passwords"
    },
    "roles": {
        "manage_permissions": "Assign permissions to roles"
    },
}

# System roles. "*" grants the whole catalog.
SYSTEM_ROLES = {
    "admin": {
        "color": "red",
        "description": "Full access to the system",
        "permissions": ["*"]
    },
    "customer_service": {
        "color": "blue",
        "description": "Operations and invoicing",
        "permissions": [
            "dashboard.view",
            "customers.view", "customers.create", "customers.update", "customers.delete", "customers.export",
            "vehicles.view", "vehicles.create", "vehicles.update", "vehicles.delete",
            "work_orders.view", "work_orders.create", "work_orders.update", "work_orders.delete",
            "work_orders.cancel", "work_orders.complete", "work_orders.export",
            "invoices.view", "invoices.create", "invoices.update", "invoices.delete",
            "invoices.print", "invoices.export",
            "inventory.view", "inventory.create", "inventory.update", "inventory.adjust_stock", "inventory.export",
            "technicians.view", "technicians.view_performance",
            "reports.view", "reports.export", "reports.operations",
        ]
    },
    "receptionist": {
        "color": "green",
        "description": "Front desk: customers and intake",
        "permissions": [
            "dashboard.view",
            "customers.view", "customers.create", "customers.update",
            "vehicles.view", "vehicles.create", "vehicles.update",
            "work_orders.view", "work_orders.create",
            "invoices.view",
            "expenses.view", "expenses.create", "expenses.update", "expenses.delete",
            "inventory.view",
        ]
    },
}


def role_translation_key(role_key: str) -> str:
    return f"roles.{role_key}.name"


def permission_translation_key(permission_key: str) -> str:
    return f"permissions.details.{permission_key}.name"


# Generate permission matrix
def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the system roles
    Format: {
        "permissions": [
            {"key": "customers.view", "resource": "customers", "action": "view",
             "category": "operations", "display_order": 10, "description": "..."},
            ...
        ],
        "roles": [
            {
                "key": "receptionist",
                "color": "green",
                "description": "...",
                "is_system_role": True,
                "permissions": ["customers.create", "customers.update", ...]
            },
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for resource, module_config in MODULES.items():
        for offset, action in enumerate(module_config["actions"]):
            description = f"{action.capitalize()} {module_config['description'].lower()}"
            if action in MODULE_SPECIFIC_PERMISSIONS.get(resource, {}):
                description = MODULE_SPECIFIC_PERMISSIONS[resource][action]

            permissions.append({
                "key": f"{resource}.{action}",
                "resource": resource,
                "action": action,
                "category": module_config["category"],
                "display_order": module_config["display_order"] + offset,
                "description": description
            })

    all_keys = [p["key"] for p in permissions]
    for role_key, role_config in SYSTEM_ROLES.items():
        if "*" in role_config["permissions"]:
            role_permissions = list(all_keys)
        else:
            role_permissions = list(role_config["permissions"])
        roles.append({
            "key": role_key,
            "color": role_config["color"],
            "description": role_config["description"],
            "is_system_role": True,
            "permissions": sorted(role_permissions)
        })

    return {
        "permissions": permissions,
        "roles": roles
    }


# Export the matrix for use in seed scripts and the key parser
PERMISSION_MATRIX = get_permission_matrix()
PERMISSION_KEYS = frozenset(p["key"] for p in PERMISSION_MATRIX["permissions"])
