"""
Compiled default module catalog.

Used when no override set has been published to the `module_definitions`
collection (see calycompta.modules.catalog).
"""

from .schemas import ModuleDefinition


def _perm(id, label, category, risk_level, description="", **extra):
    return {
        "id": id,
        "label": label,
        "description": description,
        "category": category,
        "risk_level": risk_level,
        **extra,
    }


ADMIN_MODULE = {
    "id": "admin",
    "name": "Administration",
    "description": "Gestion des modules, des rôles et du journal d'audit",
    "icon": "Settings",
    "category": "admin",
    "is_core": True,
    "permissions": {
        "modules": [
            _perm("view_modules", "Voir les modules", "view", "low"),
            _perm("install_modules", "Installer des modules", "admin", "high"),
            _perm("uninstall_modules", "Désinstaller des modules", "admin", "critical"),
            _perm("configure_modules", "Configurer les modules", "admin", "high"),
        ],
        "roles": [
            _perm("manage_roles", "Gérer les rôles", "admin", "critical"),
        ],
        "audit": [
            _perm("view_audit", "Consulter le journal d'audit", "view", "medium"),
        ],
    },
    "config": {
        "routes": [
            {"path": "/admin/modules", "component": "ModuleManagerPage", "permission": "view_modules"},
            {"path": "/admin/roles", "component": "RoleManager", "permission": "manage_roles"},
        ],
        "menu_items": [
            {"id": "admin", "label": "Administration", "icon": "Settings",
             "path": "/admin/modules", "permission": "view_modules", "position": 9},
        ],
    },
}


TRANSACTIONS_MODULE = {
    "id": "transactions",
    "name": "Transactions Bancaires",
    "description": "Gestion des transactions bancaires et réconciliation",
    "icon": "CreditCard",
    "category": "finance",
    "is_core": True,
    "settings": {
        "download": {
            "autoRenameFiles": {
                "key": "download.autoRenameFiles",
                "label": "Renommer automatiquement les fichiers",
                "type": "boolean",
                "default_value": False,
            },
            "filenamePattern": {
                "key": "download.filenamePattern",
                "label": "Format du nom de fichier",
                "type": "string",
                "default_value": "{ANNÉE}_{MOIS}_{NUMÉRO}_{DESCRIPTION}",
                "description": "Variables: {ANNÉE}, {MOIS}, {JOUR}, {NUMÉRO}, {DESCRIPTION}",
                "validation": {"custom": "no_forbidden_filename_chars"},
            },
            "useTransactionNumber": {
                "key": "download.useTransactionNumber",
                "label": "Utiliser le numéro de transaction",
                "type": "boolean",
                "default_value": True,
            },
        },
        "categorization": {
            "enableAI": {
                "key": "categorization.enableAI",
                "label": "Activer les suggestions IA",
                "type": "boolean",
                "default_value": False,
            },
            "autoSuggest": {
                "key": "categorization.autoSuggest",
                "label": "Suggestions automatiques",
                "type": "boolean",
                "default_value": True,
                "depends_on": "categorization.enableAI",
            },
            "requireCategory": {
                "key": "categorization.requireCategory",
                "label": "Catégorie obligatoire",
                "type": "boolean",
                "default_value": False,
            },
        },
        "validation": {
            "requireDoubleSignature": {
                "key": "validation.requireDoubleSignature",
                "label": "Double signature requise",
                "type": "boolean",
                "default_value": False,
            },
            "signatureThreshold": {
                "key": "validation.signatureThreshold",
                "label": "Seuil de double signature (€)",
                "type": "number",
                "default_value": 100,
                "depends_on": "validation.requireDoubleSignature",
                "validation": {"min": 0, "max": 10000},
            },
            "allowBackdating": {
                "key": "validation.allowBackdating",
                "label": "Autoriser l'antidatage",
                "type": "boolean",
                "default_value": False,
                "advanced": True,
            },
            "maxBackdatingDays": {
                "key": "validation.maxBackdatingDays",
                "label": "Jours maximum d'antidatage",
                "type": "number",
                "default_value": 30,
                "depends_on": "validation.allowBackdating",
                "validation": {"min": 1, "max": 365},
            },
        },
    },
    "permissions": {
        "basic": [
            _perm("view", "Voir les transactions", "view", "low"),
            _perm("export", "Exporter les données", "view", "low"),
        ],
        "management": [
            _perm("create", "Créer des transactions", "create", "medium"),
            _perm("update", "Modifier les transactions", "update", "medium"),
            _perm("delete", "Supprimer les transactions", "delete", "high"),
            _perm("categorize", "Catégoriser", "update", "low"),
        ],
        "advanced": [
            _perm("sign", "Signer numériquement", "manage", "medium"),
            _perm("reconcile", "Réconcilier", "manage", "medium"),
            _perm("link", "Lier aux documents", "update", "low"),
        ],
        "admin": [
            _perm("configure", "Configurer le module", "admin", "high"),
            _perm("audit", "Audit complet", "admin", "medium"),
        ],
    },
    "config": {
        "routes": [
            {"path": "/transactions", "component": "TransactionList", "permission": "view"},
            {"path": "/transactions/import", "component": "TransactionImport", "permission": "create"},
            {"path": "/transactions/:id", "component": "TransactionDetail", "permission": "view"},
            {"path": "/transactions/settings", "component": "TransactionSettings", "permission": "configure"},
        ],
        "menu_items": [
            {
                "id": "transactions", "label": "Transactions", "icon": "CreditCard",
                "path": "/transactions", "permission": "view", "position": 2,
                "sub_items": [
                    {"id": "transactions-list", "label": "Liste", "path": "/transactions", "permission": "view"},
                    {"id": "transactions-import", "label": "Importer", "path": "/transactions/import", "permission": "create"},
                    {"id": "transactions-settings", "label": "Paramètres", "path": "/transactions/settings", "permission": "configure"},
                ],
            },
        ],
        "widgets": [
            {"id": "transaction-summary", "component": "TransactionSummaryWidget",
             "permission": "view", "default_size": {"w": 6, "h": 4}},
            {"id": "pending-signatures", "component": "PendingSignaturesWidget",
             "permission": "sign", "default_size": {"w": 3, "h": 3}},
        ],
        "hooks": {
            "on_install": "createTransactionCategories",
            "on_enable": "activateTransactionSync",
            "on_disable": "pauseTransactionSync",
        },
    },
}


EXPENSES_MODULE = {
    "id": "expenses",
    "name": "Demandes de Remboursement",
    "description": "Gestion des demandes de remboursement et notes de frais",
    "icon": "Receipt",
    "category": "finance",
    "is_core": True,
    "settings": {
        "workflow": {
            "autoApprove": {
                "key": "workflow.autoApprove",
                "label": "Approbation automatique",
                "type": "boolean",
                "default_value": False,
            },
            "autoApproveThreshold": {
                "key": "workflow.autoApproveThreshold",
                "label": "Seuil d'approbation auto (€)",
                "type": "number",
                "default_value": 50,
                "depends_on": "workflow.autoApprove",
                "validation": {"min": 0, "max": 500},
            },
            "requireReceipts": {
                "key": "workflow.requireReceipts",
                "label": "Justificatifs obligatoires",
                "type": "boolean",
                "default_value": True,
            },
            "receiptThreshold": {
                "key": "workflow.receiptThreshold",
                "label": "Seuil justificatif (€)",
                "type": "number",
                "default_value": 20,
                "depends_on": "workflow.requireReceipts",
                "validation": {"min": 0, "max": 100},
            },
        },
        "notifications": {
            "notifyOnSubmission": {
                "key": "notifications.notifyOnSubmission",
                "label": "Notifier à la soumission",
                "type": "boolean",
                "default_value": True,
            },
            "notifyOnApproval": {
                "key": "notifications.notifyOnApproval",
                "label": "Notifier à l'approbation",
                "type": "boolean",
                "default_value": True,
            },
            "notifyOnRejection": {
                "key": "notifications.notifyOnRejection",
                "label": "Notifier en cas de rejet",
                "type": "boolean",
                "default_value": True,
            },
            "reminderDays": {
                "key": "notifications.reminderDays",
                "label": "Rappel après (jours)",
                "type": "number",
                "default_value": 7,
                "validation": {"min": 1, "max": 30},
            },
        },
        "payment": {
            "defaultPaymentMethod": {
                "key": "payment.defaultPaymentMethod",
                "label": "Méthode de paiement par défaut",
                "type": "select",
                "default_value": "transfer",
                "options": [
                    {"value": "transfer", "label": "Virement bancaire"},
                    {"value": "cash", "label": "Espèces"},
                    {"value": "check", "label": "Chèque"},
                ],
            },
            "requireIBAN": {
                "key": "payment.requireIBAN",
                "label": "IBAN obligatoire",
                "type": "boolean",
                "default_value": True,
                "depends_on": "payment.defaultPaymentMethod=transfer",
            },
        },
    },
    "permissions": {
        "requester": [
            _perm("view_own", "Voir ses demandes", "view", "low"),
            _perm("create", "Créer une demande", "create", "low"),
            _perm("update_own", "Modifier ses demandes", "update", "low",
                  requires_condition="status=draft"),
            _perm("delete_own", "Supprimer ses demandes", "delete", "low",
                  requires_condition="status=draft"),
        ],
        "approver": [
            _perm("view_all", "Voir toutes les demandes", "view", "medium",
                  implied_permissions=["view_own"]),
            _perm("approve", "Approuver les demandes", "manage", "high"),
            _perm("reject", "Rejeter les demandes", "manage", "medium"),
            _perm("comment", "Commenter", "update", "low"),
        ],
        "admin": [
            _perm("update_all", "Modifier toutes les demandes", "update", "high",
                  implied_permissions=["update_own"]),
            _perm("delete_all", "Supprimer toutes les demandes", "delete", "critical",
                  implied_permissions=["delete_own"]),
            _perm("export", "Exporter les données", "view", "medium"),
            _perm("configure", "Configurer le module", "admin", "high"),
        ],
    },
    "config": {
        "routes": [
            {"path": "/expenses", "component": "ExpenseList", "permission": "view_own"},
            {"path": "/expenses/new", "component": "ExpenseForm", "permission": "create"},
            {"path": "/expenses/:id", "component": "ExpenseDetail", "permission": "view_own"},
            {"path": "/expenses/settings", "component": "ExpenseSettings", "permission": "configure"},
        ],
        "menu_items": [
            {"id": "expenses", "label": "Dépenses", "icon": "Receipt", "path": "/expenses",
             "permission": "view_own", "position": 3,
             "badge": {"type": "count", "value": "pendingCount"}},
        ],
        "widgets": [
            {"id": "expense-summary", "component": "ExpenseSummaryWidget",
             "permission": "view_own", "default_size": {"w": 4, "h": 3}},
            {"id": "pending-approvals", "component": "PendingApprovalsWidget",
             "permission": "approve", "default_size": {"w": 4, "h": 4}},
        ],
    },
}


EVENTS_MODULE = {
    "id": "events",
    "name": "Événements & Activités",
    "description": "Organisation et gestion des événements du club",
    "icon": "Calendar",
    "category": "operations",
    "is_core": True,
    "dependencies": ["expenses"],
    "settings": {
        "general": {
            "defaultEventType": {
                "key": "general.defaultEventType",
                "label": "Type d'événement par défaut",
                "type": "select",
                "default_value": "sortie",
                "options": [
                    {"value": "sortie", "label": "Sortie plongée"},
                    {"value": "formation", "label": "Formation"},
                    {"value": "reunion", "label": "Réunion"},
                    {"value": "social", "label": "Événement social"},
                ],
            },
            "allowGuestRegistration": {
                "key": "general.allowGuestRegistration",
                "label": "Autoriser les invités",
                "type": "boolean",
                "default_value": True,
            },
            "maxGuestsPerMember": {
                "key": "general.maxGuestsPerMember",
                "label": "Invités max par membre",
                "type": "number",
                "default_value": 2,
                "depends_on": "general.allowGuestRegistration",
                "validation": {"min": 0, "max": 10},
            },
        },
        "registration": {
            "requirePaymentUpfront": {
                "key": "registration.requirePaymentUpfront",
                "label": "Paiement à l'inscription",
                "type": "boolean",
                "default_value": False,
            },
            "registrationDeadlineDays": {
                "key": "registration.registrationDeadlineDays",
                "label": "Délai d'inscription (jours avant)",
                "type": "number",
                "default_value": 3,
                "validation": {"min": 0, "max": 30},
            },
            "waitingListEnabled": {
                "key": "registration.waitingListEnabled",
                "label": "Activer la liste d'attente",
                "type": "boolean",
                "default_value": True,
            },
        },
        "communication": {
            "sendConfirmation": {
                "key": "communication.sendConfirmation",
                "label": "Email de confirmation",
                "type": "boolean",
                "default_value": True,
            },
            "sendReminder": {
                "key": "communication.sendReminder",
                "label": "Email de rappel",
                "type": "boolean",
                "default_value": True,
            },
            "reminderDaysBefore": {
                "key": "communication.reminderDaysBefore",
                "label": "Rappel (jours avant)",
                "type": "number",
                "default_value": 2,
                "depends_on": "communication.sendReminder",
                "validation": {"min": 1, "max": 7},
            },
        },
    },
    "permissions": {
        "participant": [
            _perm("view", "Voir les événements", "view", "low"),
            _perm("register", "S'inscrire", "create", "low"),
            _perm("cancel_registration", "Annuler son inscription", "delete", "low"),
        ],
        "organizer": [
            _perm("create", "Créer des événements", "create", "medium"),
            _perm("update_own", "Modifier ses événements", "update", "medium"),
            _perm("manage_participants", "Gérer les participants", "manage", "medium"),
            _perm("send_messages", "Envoyer des messages", "manage", "low"),
        ],
        "admin": [
            _perm("update_all", "Modifier tous les événements", "update", "high"),
            _perm("delete", "Supprimer des événements", "delete", "high"),
            _perm("financial_report", "Rapports financiers", "admin", "medium"),
            _perm("configure", "Configurer le module", "admin", "high"),
        ],
    },
    "config": {
        "routes": [
            {"path": "/events", "component": "EventList", "permission": "view"},
            {"path": "/events/calendar", "component": "EventCalendar", "permission": "view"},
            {"path": "/events/new", "component": "EventForm", "permission": "create"},
            {"path": "/events/:id", "component": "EventDetail", "permission": "view"},
        ],
        "menu_items": [
            {"id": "events", "label": "Événements", "icon": "Calendar",
             "path": "/events", "permission": "view", "position": 4},
        ],
        "widgets": [
            {"id": "upcoming-events", "component": "UpcomingEventsWidget",
             "permission": "view", "default_size": {"w": 6, "h": 4}},
        ],
    },
}


INVENTORY_MODULE = {
    "id": "inventory",
    "name": "Gestion d'Inventaire",
    "description": "Suivi du matériel, stocks et prêts",
    "icon": "Package",
    "category": "operations",
    "is_core": False,
    "settings": {
        "general": {
            "enableBarcodes": {
                "key": "general.enableBarcodes",
                "label": "Activer les codes-barres",
                "type": "boolean",
                "default_value": False,
            },
            "autoGenerateReferences": {
                "key": "general.autoGenerateReferences",
                "label": "Références automatiques",
                "type": "boolean",
                "default_value": True,
            },
            "referencePrefix": {
                "key": "general.referencePrefix",
                "label": "Préfixe des références",
                "type": "string",
                "default_value": "INV",
                "depends_on": "general.autoGenerateReferences",
                "validation": {"pattern": "^[A-Z0-9]{1,8}$"},
            },
        },
        "alerts": {
            "lowStockWarning": {
                "key": "alerts.lowStockWarning",
                "label": "Alerte stock bas",
                "type": "boolean",
                "default_value": True,
            },
            "lowStockThreshold": {
                "key": "alerts.lowStockThreshold",
                "label": "Seuil de stock bas",
                "type": "number",
                "default_value": 5,
                "depends_on": "alerts.lowStockWarning",
                "validation": {"min": 1, "max": 100},
            },
            "maintenanceReminders": {
                "key": "alerts.maintenanceReminders",
                "label": "Rappels de maintenance",
                "type": "boolean",
                "default_value": True,
            },
            "maintenanceFrequencyDays": {
                "key": "alerts.maintenanceFrequencyDays",
                "label": "Fréquence de maintenance (jours)",
                "type": "number",
                "default_value": 180,
                "depends_on": "alerts.maintenanceReminders",
                "validation": {"min": 30, "max": 365},
            },
        },
        "loans": {
            "requireApproval": {
                "key": "loans.requireApproval",
                "label": "Approbation des prêts",
                "type": "boolean",
                "default_value": False,
            },
            "requireCaution": {
                "key": "loans.requireCaution",
                "label": "Caution obligatoire",
                "type": "boolean",
                "default_value": True,
            },
            "defaultCautionAmount": {
                "key": "loans.defaultCautionAmount",
                "label": "Montant de caution par défaut (€)",
                "type": "number",
                "default_value": 50,
                "depends_on": "loans.requireCaution",
                "validation": {"min": 0, "max": 500},
            },
            "maxLoanDurationDays": {
                "key": "loans.maxLoanDurationDays",
                "label": "Durée maximale de prêt (jours)",
                "type": "number",
                "default_value": 30,
                "validation": {"min": 1, "max": 365},
            },
            "sendReturnReminder": {
                "key": "loans.sendReturnReminder",
                "label": "Rappel de retour",
                "type": "boolean",
                "default_value": True,
            },
            "reminderDaysBefore": {
                "key": "loans.reminderDaysBefore",
                "label": "Rappel (jours avant)",
                "type": "number",
                "default_value": 3,
                "depends_on": "loans.sendReturnReminder",
                "validation": {"min": 1, "max": 7},
            },
        },
    },
    "permissions": {
        "viewer": [
            _perm("view", "Voir l'inventaire", "view", "low"),
            _perm("search", "Rechercher", "view", "low"),
        ],
        "operator": [
            _perm("add_items", "Ajouter du matériel", "create", "medium"),
            _perm("edit_items", "Modifier le matériel", "update", "medium"),
            _perm("move_items", "Déplacer le matériel", "update", "low"),
            _perm("create_loan", "Créer un prêt", "create", "medium"),
            _perm("return_item", "Enregistrer un retour", "update", "medium"),
        ],
        "manager": [
            _perm("delete_items", "Supprimer du matériel", "delete", "high"),
            _perm("approve_loans", "Approuver les prêts", "manage", "medium"),
            _perm("manage_cautions", "Gérer les cautions", "manage", "high"),
            _perm("maintenance", "Planifier la maintenance", "manage", "medium"),
        ],
        "admin": [
            _perm("configure", "Configurer le module", "admin", "high"),
            _perm("manage_types", "Gérer les types", "admin", "medium"),
            _perm("manage_locations", "Gérer les emplacements", "admin", "medium"),
            _perm("export", "Exporter", "admin", "low"),
            _perm("audit", "Audit", "admin", "medium"),
        ],
    },
    "config": {
        "routes": [
            {"path": "/inventory", "component": "InventoryDashboard", "permission": "view"},
            {"path": "/inventory/items", "component": "ItemList", "permission": "view"},
            {"path": "/inventory/items/new", "component": "ItemForm", "permission": "add_items"},
            {"path": "/inventory/loans", "component": "LoanList", "permission": "view"},
            {"path": "/inventory/loans/new", "component": "LoanForm", "permission": "create_loan"},
            {"path": "/inventory/maintenance", "component": "MaintenanceSchedule", "permission": "maintenance"},
            {"path": "/inventory/settings", "component": "InventorySettings", "permission": "configure"},
        ],
        "menu_items": [
            {
                "id": "inventory", "label": "Inventaire", "icon": "Package",
                "path": "/inventory", "permission": "view", "position": 5,
                "sub_items": [
                    {"id": "inventory-items", "label": "Matériel", "path": "/inventory/items", "permission": "view"},
                    {"id": "inventory-loans", "label": "Prêts", "path": "/inventory/loans", "permission": "view",
                     "badge": {"type": "count", "value": "activeLoanCount"}},
                    {"id": "inventory-maintenance", "label": "Maintenance",
                     "path": "/inventory/maintenance", "permission": "maintenance"},
                ],
            },
        ],
        "widgets": [
            {"id": "inventory-status", "component": "InventoryStatusWidget",
             "permission": "view", "default_size": {"w": 4, "h": 3}},
            {"id": "active-loans", "component": "ActiveLoansWidget",
             "permission": "view", "default_size": {"w": 4, "h": 4}},
            {"id": "maintenance-alerts", "component": "MaintenanceAlertsWidget",
             "position": "sidebar", "permission": "maintenance", "default_size": {"w": 3, "h": 3}},
        ],
        "hooks": {
            "on_install": "createDefaultItemTypes",
            "on_enable": "startMaintenanceScheduler",
            "on_disable": "stopMaintenanceScheduler",
        },
        "scheduled_tasks": [
            {"id": "maintenance-check", "name": "Vérification maintenance",
             "schedule": "0 9 * * *", "handler": "checkMaintenanceDue"},
            {"id": "loan-reminder", "name": "Rappel de retour",
             "schedule": "0 10 * * *", "handler": "sendLoanReturnReminders"},
        ],
    },
}


EXCURSIONS_MODULE = {
    "id": "excursions",
    "name": "Excursions & Voyages",
    "description": "Organisation des voyages plongée et des réservations",
    "icon": "MapPin",
    "category": "operations",
    "is_core": False,
    "dependencies": ["events", "expenses"],
    "settings": {
        "booking": {
            "requireAdvancePayment": {
                "key": "booking.requireAdvancePayment",
                "label": "Acompte obligatoire",
                "type": "boolean",
                "default_value": True,
            },
            "advancePaymentPercent": {
                "key": "booking.advancePaymentPercent",
                "label": "Pourcentage d'acompte",
                "type": "number",
                "default_value": 30,
                "depends_on": "booking.requireAdvancePayment",
                "validation": {"min": 10, "max": 100},
            },
            "paymentDeadlineDays": {
                "key": "booking.paymentDeadlineDays",
                "label": "Délai de paiement (jours avant)",
                "type": "number",
                "default_value": 14,
                "validation": {"min": 1, "max": 60},
            },
        },
        "pricing": {
            "memberDiscount": {
                "key": "pricing.memberDiscount",
                "label": "Réduction membre (%)",
                "type": "number",
                "default_value": 10,
                "validation": {"min": 0, "max": 50},
            },
            "earlyBirdDiscount": {
                "key": "pricing.earlyBirdDiscount",
                "label": "Réduction early bird (%)",
                "type": "number",
                "default_value": 5,
                "validation": {"min": 0, "max": 30},
            },
            "earlyBirdDaysBefore": {
                "key": "pricing.earlyBirdDaysBefore",
                "label": "Délai early bird (jours)",
                "type": "number",
                "default_value": 30,
                "validation": {"min": 7, "max": 90},
            },
        },
        "cancellation": {
            "allowCancellation": {
                "key": "cancellation.allowCancellation",
                "label": "Autoriser les annulations",
                "type": "boolean",
                "default_value": True,
            },
            "cancellationDeadlineDays": {
                "key": "cancellation.cancellationDeadlineDays",
                "label": "Délai d'annulation (jours)",
                "type": "number",
                "default_value": 7,
                "depends_on": "cancellation.allowCancellation",
                "validation": {"min": 1, "max": 30},
            },
            "refundPolicy": {
                "key": "cancellation.refundPolicy",
                "label": "Politique de remboursement",
                "type": "select",
                "default_value": "partial",
                "depends_on": "cancellation.allowCancellation",
                "options": [
                    {"value": "full", "label": "Remboursement total"},
                    {"value": "partial", "label": "Remboursement partiel"},
                    {"value": "none", "label": "Aucun remboursement"},
                    {"value": "credit", "label": "Avoir uniquement"},
                ],
            },
            "partialRefundPercent": {
                "key": "cancellation.partialRefundPercent",
                "label": "Pourcentage remboursé",
                "type": "number",
                "default_value": 70,
                "depends_on": "cancellation.refundPolicy=partial",
                "validation": {"min": 0, "max": 100},
            },
        },
    },
    "permissions": {
        "traveler": [
            _perm("view", "Voir les excursions", "view", "low"),
            _perm("book", "Réserver", "create", "low"),
            _perm("cancel_own", "Annuler sa réservation", "delete", "low"),
        ],
        "organizer": [
            _perm("create", "Créer des excursions", "create", "medium"),
            _perm("manage_bookings", "Gérer les réservations", "manage", "medium"),
            _perm("manage_payments", "Gérer les paiements", "manage", "high"),
        ],
        "admin": [
            _perm("financial_report", "Rapports financiers", "admin", "medium"),
            _perm("configure", "Configurer le module", "admin", "high"),
        ],
    },
    "config": {
        "routes": [
            {"path": "/excursions", "component": "ExcursionList", "permission": "view"},
            {"path": "/excursions/new", "component": "ExcursionForm", "permission": "create"},
            {"path": "/excursions/:id", "component": "ExcursionDetail", "permission": "view"},
            {"path": "/excursions/:id/bookings", "component": "BookingManagement", "permission": "manage_bookings"},
        ],
        "menu_items": [
            {"id": "excursions", "label": "Excursions", "icon": "MapPin",
             "path": "/excursions", "permission": "view", "position": 6},
        ],
        "widgets": [
            {"id": "upcoming-excursions", "component": "UpcomingExcursionsWidget",
             "permission": "view", "default_size": {"w": 6, "h": 4}},
        ],
    },
}


CORE_MODULES = [
    ModuleDefinition(**m)
    for m in (ADMIN_MODULE, TRANSACTIONS_MODULE, EXPENSES_MODULE, EVENTS_MODULE)
]
OPTIONAL_MODULES = [
    ModuleDefinition(**m) for m in (INVENTORY_MODULE, EXCURSIONS_MODULE)
]
BUILTIN_MODULES = CORE_MODULES + OPTIONAL_MODULES
