# Models package - database tables
from hirelocal.models.user import User
from hirelocal.models.freelancer import FreelancerProfile
from hirelocal.models.lead import Lead
from hirelocal.models.subscription import Subscription
from hirelocal.models.interaction import FreelancerLeadInteraction
from hirelocal.models.notification import Notification
