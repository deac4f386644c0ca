from qarz_portal.database.models.user_model import User, Address
from qarz_portal.database.models.loan_request_model import LoanRequest, LoanDocuments
from qarz_portal.database.models.guarantor_model import Guarantor
from qarz_portal.database.models.audit_log_model import AuditLog
